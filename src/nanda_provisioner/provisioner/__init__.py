"""Host provisioning: public IP discovery, artifacts, playbook execution."""

from .node import ProvisionNode

__all__ = ["ProvisionNode"]
