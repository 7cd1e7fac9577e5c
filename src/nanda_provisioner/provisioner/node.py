"""Provisioner node - main orchestration logic.

Provisions the host in a fixed sequence:
1. Detects the public IP
2. Writes the Ansible inventory
3. Writes group_vars/all.yml with API keys and agent settings
4. Locates the playbook
5. Runs ansible-playbook and classifies the result

Artifacts are removed on every exit path. Nothing is retried.
"""

from collections.abc import Sequence
from pathlib import Path
import shutil
import tempfile
import uuid

from ..config import Settings, get_settings
from ..exceptions import (
    ExternalToolError,
    FilesystemError,
    PlaybookNotFoundError,
    ProvisionError,
    ResolutionError,
)
from ..logging_config import clear_correlation_id, get_logger, set_correlation_id
from ..models import ProvisionArtifacts, ProvisionConfig
from .ansible_runner import run_playbook
from .artifacts import (
    build_group_vars,
    group_vars_dir,
    write_group_vars,
    write_inventory,
)
from .ip_resolver import IP_SERVICES, resolve_public_address
from .playbook import resolve_playbook

logger = get_logger(__name__)

WORK_DIR_PREFIX = "nanda-provision-"


def _with_context(error: ProvisionError, context: str) -> ProvisionError:
    """Return an error of the same kind with the failing step prefixed."""
    message = f"{context}: {error}"
    if isinstance(error, ExternalToolError):
        return ExternalToolError(message, exit_code=error.exit_code, output=error.output)
    return type(error)(message)


class ProvisionNode:
    """Runs a single provisioning pass against this host."""

    def __init__(
        self,
        config: ProvisionConfig,
        settings: Settings | None = None,
        ip_services: Sequence[str] = IP_SERVICES,
    ):
        self.config = config
        self.settings = settings or get_settings()
        self.ip_services = ip_services

    def setup(
        self,
        anthropic_api_key: str,
        smithery_api_key: str,
        verbose: bool = False,
        work_dir: Path | None = None,
    ) -> None:
        """Provision the host.

        Args:
            anthropic_api_key: Anthropic API key written to group vars
            smithery_api_key: Smithery API key written to group vars
            verbose: Run ansible-playbook with -vvv
            work_dir: Directory for the inventory and group_vars. When omitted a
                per-run temporary directory is created and removed afterwards.

        Raises:
            ProvisionError: One of its subclasses, naming the step that failed.
        """
        set_correlation_id(uuid.uuid4().hex[:12])
        try:
            self._setup_server(anthropic_api_key, smithery_api_key, verbose, work_dir)
        except ProvisionError as e:
            logger.error("setup_failed", error=str(e), error_type=type(e).__name__)
            raise _with_context(e, "setup server failed") from e
        finally:
            clear_correlation_id()

        logger.info("setup_completed", domain=self.config.domain, agent_id=self.config.agent_id)

    def _setup_server(
        self,
        anthropic_api_key: str,
        smithery_api_key: str,
        verbose: bool,
        work_dir: Path | None,
    ) -> None:
        owns_work_dir = work_dir is None
        if owns_work_dir:
            try:
                work_dir = Path(tempfile.mkdtemp(prefix=WORK_DIR_PREFIX))
            except OSError as e:
                raise FilesystemError(f"failed to create work directory: {e}") from e
        artifacts = ProvisionArtifacts(work_dir=Path(work_dir))

        try:
            try:
                server_ip = resolve_public_address(
                    self.ip_services, timeout=self.settings.ip_lookup_timeout
                )
            except ResolutionError as e:
                raise _with_context(e, "failed to create inventory: failed to get public IP") from e

            try:
                artifacts.inventory_path = write_inventory(
                    self.config, server_ip, artifacts.work_dir
                )
            except FilesystemError as e:
                raise _with_context(e, "failed to create inventory") from e

            artifacts.group_vars_dir = group_vars_dir(artifacts.work_dir)
            group_vars = build_group_vars(self.config, anthropic_api_key, smithery_api_key)
            try:
                artifacts.group_vars_path = write_group_vars(group_vars, artifacts.work_dir)
            except FilesystemError as e:
                raise _with_context(e, "failed to create group_vars") from e

            playbook_path = resolve_playbook(self.settings.playbook_path)
            if not playbook_path:
                raise PlaybookNotFoundError("ansible playbook not found")
            logger.info("playbook_located", path=playbook_path)

            result = run_playbook(
                str(artifacts.inventory_path),
                playbook_path,
                verbose=verbose,
                timeout=self.settings.provisioning_timeout,
                executable=self.settings.ansible_executable,
            )
            if not result.success:
                error = result.error
                if not isinstance(error, ProvisionError):
                    error = ExternalToolError("ansible playbook failed", output=result.output)
                raise error

            logger.info("server_setup_completed")
        finally:
            self._cleanup(artifacts, remove_work_dir=owns_work_dir)

    def _cleanup(self, artifacts: ProvisionArtifacts, remove_work_dir: bool) -> None:
        """Remove run artifacts. Failures are logged, never raised."""
        targets = []
        if artifacts.inventory_path is not None:
            targets.append(artifacts.inventory_path)
        if artifacts.group_vars_dir is not None:
            targets.append(artifacts.group_vars_dir)
        if remove_work_dir:
            targets.append(artifacts.work_dir)

        for target in targets:
            try:
                if target.is_dir():
                    shutil.rmtree(target)
                else:
                    target.unlink(missing_ok=True)
            except OSError as e:
                logger.warning("artifact_cleanup_failed", path=str(target), error=str(e))

        logger.debug("artifacts_cleaned_up", paths=[str(t) for t in targets])
