"""
Error taxonomy for the registry core.

Every failure the core reports to a caller is a ``RegistryError`` subclass.
Each class carries the HTTP status the boundary answers with, so blueprints
never translate errors themselves: one handler in ``app.py`` renders them all.

Audit writes, notification mail and best-effort blob cleanup never raise
these; their failures are logged where they happen.
"""


class RegistryError(Exception):
    """Base class for expected, caller-visible failures."""

    status_code = 400

    def __init__(self, message=None):
        self.message = message or self.__class__.__doc__.strip().splitlines()[0]
        super().__init__(self.message)

    def to_dict(self):
        return {"error": self.__class__.__name__, "message": self.message}


class ValidationFailed(RegistryError):
    """Request payload failed validation."""

    status_code = 400

    def __init__(self, message=None, details=None):
        super().__init__(message)
        self.details = details or []

    def to_dict(self):
        data = super().to_dict()
        if self.details:
            data["details"] = self.details
        return data


class AuthenticationFailed(RegistryError):
    """Authentication required."""

    status_code = 401


class Forbidden(RegistryError):
    """Insufficient permissions."""

    status_code = 403


class NotFound(RegistryError):
    """Record not found."""

    status_code = 404


class DuplicateKey(RegistryError):
    """Record with the same unique key already exists."""

    status_code = 409


class InvalidTransition(RegistryError):
    """Status change is not allowed from the current status."""

    status_code = 409


class Conflict(RegistryError):
    """Record was modified by another request."""

    status_code = 409


class DependentRecordsExist(Conflict):
    """Record is still referenced by other records."""


class FileMissing(RegistryError):
    """Document file is missing from storage."""

    status_code = 410


class FileTooLarge(RegistryError):
    """File size exceeds maximum limit."""

    status_code = 413


class InvalidFileType(RegistryError):
    """Invalid file type."""

    status_code = 415


class ExportFailed(RegistryError):
    """Report could not be generated."""

    status_code = 500
