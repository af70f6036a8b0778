class VersolveError(Exception):
    """Base exception for all versolve input and loading errors."""

    def __init__(self, message: str = "") -> None:
        self.message = message
        super().__init__(message)


class VersionParseError(VersolveError, ValueError):
    pass


class ConstraintParseError(VersolveError, ValueError):
    pass


class RepositoryError(VersolveError):
    """Raised when package records cannot form a consistent repository."""


class RegistryError(VersolveError):
    """Raised when a registry index file cannot be read or validated."""


class ManifestError(VersolveError):
    """Raised when a project manifest cannot be read or its constraints conflict."""


class LockFileError(VersolveError):
    """Raised when lock file parsing, generation, or I/O fails."""


class SettingsError(VersolveError):
    """Raised when a configured setting value cannot be interpreted."""
