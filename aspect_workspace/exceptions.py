"""
Error taxonomy for workspace, package and migration operations.

Every error carries the HTTP status the API layer renders it with.
"""


class WorkspaceError(Exception):
    """Base class for all domain errors raised by the service layer."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(WorkspaceError):
    """A requested model, identity or export session does not exist."""

    status_code = 404


class InvalidIdentity(WorkspaceError):
    """No semantic identity could be derived for a model file."""

    status_code = 400


class SecurityViolation(WorkspaceError):
    """An archive entry escapes its destination or breaks a safety limit."""

    status_code = 400


class FileNameError(SecurityViolation):
    """An archive entry name contains characters outside the allow-list."""


class Conflict(WorkspaceError):
    """The destination of a non-overwriting write already exists."""

    status_code = 409


class ResolutionError(WorkspaceError):
    """A document could not be parsed or one of its references is unresolved."""

    status_code = 422


class UnsupportedVersion(ResolutionError):
    """A document uses a meta-model version the upgrader cannot handle."""


class IOFailure(WorkspaceError):
    """Reading or writing the workspace or an archive failed."""

    status_code = 500
