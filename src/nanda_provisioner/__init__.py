"""Provision a single host for running NANDA agents."""

from .exceptions import (
    ExternalToolError,
    FilesystemError,
    PlaybookNotFoundError,
    ProvisionError,
    ResolutionError,
)
from .models import GroupVars, ProvisionConfig, ProvisionResult, generate_agent_id
from .provisioner import ProvisionNode

__all__ = [
    "ProvisionNode",
    "ProvisionConfig",
    "ProvisionResult",
    "GroupVars",
    "generate_agent_id",
    "ProvisionError",
    "ResolutionError",
    "FilesystemError",
    "PlaybookNotFoundError",
    "ExternalToolError",
]
