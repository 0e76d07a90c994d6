"""
bundle-backup: git bundle snapshots of registered projects, run from cron.

This package keeps a small JSON registry of project working trees and
writes one ``git bundle`` per project under a shared backup root.
"""

__version__ = "0.1.0"
