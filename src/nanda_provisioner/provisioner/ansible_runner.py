"""Ansible playbook execution for the provisioner."""

import re
import subprocess
import time

from ..exceptions import ExternalToolError
from ..logging_config import get_logger
from ..models import ProvisionResult

logger = get_logger(__name__)

ANSIBLE_PLAYBOOK = "ansible-playbook"
VERBOSE_FLAG = "-vvv"

# PLAY RECAP line, e.g. "server : ok=12 changed=3 unreachable=0 failed=1 ..."
FAILED_TASKS_PATTERN = re.compile(r"\bfailed=([1-9]\d*)")


def build_command(
    inventory_path: str,
    playbook_path: str,
    verbose: bool = False,
    executable: str = ANSIBLE_PLAYBOOK,
) -> list[str]:
    cmd = [executable, "-i", inventory_path, playbook_path]
    if verbose:
        cmd.append(VERBOSE_FLAG)
    return cmd


def has_failed_tasks(output: str) -> bool:
    """Check the play recap for a non-zero failed count."""
    return FAILED_TASKS_PATTERN.search(output) is not None


def run_playbook(
    inventory_path: str,
    playbook_path: str,
    verbose: bool = False,
    timeout: int | None = None,
    executable: str = ANSIBLE_PLAYBOOK,
) -> ProvisionResult:
    """Run ansible-playbook against the inventory and classify the outcome.

    The exit code is authoritative. A zero exit whose recap still shows failed
    tasks is treated as a failure too.

    Args:
        inventory_path: Path to the generated inventory file
        playbook_path: Absolute path to the playbook
        verbose: Append -vvv
        timeout: Execution timeout in seconds (None waits indefinitely)
        executable: ansible-playbook binary, resolved from PATH

    Returns:
        ProvisionResult with combined stdout/stderr as output
    """
    cmd = build_command(str(inventory_path), str(playbook_path), verbose, executable)
    logger.info("ansible_playbook_start", command=cmd, timeout=timeout)

    start = time.time()
    try:
        process = subprocess.run(  # noqa: S603
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            timeout=timeout,
        )
    except OSError as e:
        logger.error(
            "ansible_playbook_not_runnable",
            executable=executable,
            error=str(e),
            error_type=type(e).__name__,
        )
        return ProvisionResult(
            success=False,
            output="",
            error=ExternalToolError(f"cannot run {executable}: {e}"),
        )
    except subprocess.TimeoutExpired as e:
        output = _decode(e.output)
        logger.error("ansible_playbook_timeout", timeout=timeout, output=output)
        return ProvisionResult(
            success=False,
            output=output,
            error=ExternalToolError(f"ansible playbook timed out after {timeout}s", output=output),
        )

    output = process.stdout or ""
    duration = time.time() - start

    if process.returncode != 0:
        logger.error(
            "ansible_playbook_failed",
            exit_code=process.returncode,
            duration_sec=round(duration, 2),
            output=output,
        )
        return ProvisionResult(
            success=False,
            output=output,
            error=ExternalToolError(
                f"ansible playbook failed: exit status {process.returncode}",
                exit_code=process.returncode,
                output=output,
            ),
        )

    logger.info(
        "ansible_playbook_complete",
        exit_code=process.returncode,
        duration_sec=round(duration, 2),
        output=output,
    )

    if has_failed_tasks(output):
        logger.error("ansible_playbook_task_failures")
        return ProvisionResult(
            success=False,
            output=output,
            error=ExternalToolError(
                "ansible playbook reported task failures",
                exit_code=process.returncode,
                output=output,
            ),
        )

    return ProvisionResult(success=True, output=output)


def _decode(output: bytes | str | None) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode(errors="replace")
    return output
