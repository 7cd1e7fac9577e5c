"""Errors raised while provisioning a host."""


class ProvisionError(Exception):
    """Base class for provisioning failures."""

    pass


class ResolutionError(ProvisionError):
    """Raised when no lookup service returned a public IP."""

    pass


class FilesystemError(ProvisionError):
    """Raised when an inventory or group vars artifact cannot be written."""

    pass


class PlaybookNotFoundError(ProvisionError):
    """Raised when none of the playbook candidate paths exist."""

    pass


class ExternalToolError(ProvisionError):
    """Raised when ansible-playbook exits non-zero or reports failed tasks."""

    def __init__(self, message: str, exit_code: int | None = None, output: str = ""):
        super().__init__(message)
        self.exit_code = exit_code
        self.output = output
