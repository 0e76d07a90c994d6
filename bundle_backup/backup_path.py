"""Deterministic backup artifact locations."""

from __future__ import annotations

import os
from typing import Optional

from .errors import ConfigurationError
from .identity import Identity

BUNDLE_SUFFIX = ".git.bundle"


def default_backup_path(root: Optional[str], identity: Identity) -> str:
    """
    Compute the canonical bundle path for a project.

    Args:
        root: Backup root directory shared by all projects
        identity: Resolved project identity

    Returns:
        ``<root>/<identity>.git.bundle``
    """
    if not root:
        raise ConfigurationError(
            "default_backup_root must be set to compute a backup path"
        )
    if not identity.known:
        raise ConfigurationError("Cannot compute a backup path for an unknown project")
    return os.path.join(root, f"{identity}{BUNDLE_SUFFIX}")


def is_proper_backup_path(path: Optional[str]) -> bool:
    """Check whether an externally supplied backup path can be trusted as-is."""
    return bool(path) and path.endswith(BUNDLE_SUFFIX)
