"""Inventory and group vars artifacts consumed by ansible-playbook.

Both artifacts live under a per-run work directory. ``group_vars/`` sits next
to the inventory file so that Ansible picks it up automatically.
"""

import os
from pathlib import Path

import yaml

from ..exceptions import FilesystemError
from ..logging_config import get_logger
from ..models import GITHUB_REPO, GroupVars, ProvisionConfig

logger = get_logger(__name__)

INVENTORY_FILENAME = "ioa_inventory.ini"
GROUP_VARS_DIRNAME = "group_vars"
GROUP_VARS_FILENAME = "all.yml"

INVENTORY_TEMPLATE = """[servers]
server ansible_host={server_ip}

[all:vars]
ansible_user=root
ansible_connection=local
domain_name={domain}
agent_id_prefix={agent_id}
github_repo={github_repo}
registry_url={registry_url}
"""


def render_inventory(config: ProvisionConfig, server_ip: str) -> str:
    return INVENTORY_TEMPLATE.format(
        server_ip=server_ip,
        domain=config.domain,
        agent_id=config.agent_id,
        github_repo=GITHUB_REPO,
        registry_url=config.registry_url,
    )


def write_inventory(config: ProvisionConfig, server_ip: str, work_dir: Path) -> Path:
    """Write the single-host inventory file.

    Raises:
        FilesystemError: If the file cannot be written.
    """
    inventory_path = Path(work_dir) / INVENTORY_FILENAME
    try:
        inventory_path.write_text(render_inventory(config, server_ip))
    except OSError as e:
        raise FilesystemError(f"failed to write inventory file: {e}") from e

    logger.info("inventory_created", path=str(inventory_path))
    return inventory_path


def build_group_vars(
    config: ProvisionConfig,
    anthropic_api_key: str,
    smithery_api_key: str,
) -> GroupVars:
    return GroupVars(
        anthropic_api_key=anthropic_api_key,
        smithery_api_key=smithery_api_key,
        domain_name=config.domain,
        agent_id_prefix=config.agent_id,
        github_repo=GITHUB_REPO,
        num_agents=config.num_agents,
        registry_url=config.registry_url,
    )


def group_vars_dir(work_dir: Path) -> Path:
    return Path(work_dir) / GROUP_VARS_DIRNAME


def create_group_vars_dir(work_dir: Path) -> Path:
    """Create ``group_vars/`` under the work directory if it is absent.

    Raises:
        FilesystemError: If the directory cannot be created.
    """
    directory = group_vars_dir(work_dir)
    try:
        directory.mkdir(mode=0o755, parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemError(f"failed to create group_vars directory: {e}") from e

    logger.info("group_vars_dir_created", path=str(directory))
    return directory


def write_group_vars(group_vars: GroupVars, work_dir: Path) -> Path:
    """Serialize group vars to ``group_vars/all.yml``.

    The file holds API keys, so it is created owner-readable only.

    Raises:
        FilesystemError: If serialization, directory creation or the write fails.
    """
    directory = create_group_vars_dir(work_dir)
    path = directory / GROUP_VARS_FILENAME

    try:
        data = yaml.safe_dump(group_vars.model_dump(), sort_keys=False)
    except yaml.YAMLError as e:
        raise FilesystemError(f"failed to marshal group vars: {e}") from e

    try:
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w") as f:
            f.write(data)
    except OSError as e:
        raise FilesystemError(f"failed to write group vars file: {e}") from e

    logger.info("group_vars_written", path=str(path))
    return path
