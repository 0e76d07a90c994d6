"""Exception types raised by bundle-backup."""


class BundleBackupError(Exception):
    """Base class for all bundle-backup errors."""


class ConfigurationError(BundleBackupError, ValueError):
    """Incomplete or invalid project, registry or application configuration."""


class StoreError(BundleBackupError):
    """The persisted project store could not be read, parsed or written."""


class InvalidInvocationError(BundleBackupError):
    """The command line asks for something that cannot be done."""
