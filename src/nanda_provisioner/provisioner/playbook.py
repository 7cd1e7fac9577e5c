"""Playbook discovery.

Earlier candidates win: a checkout's ``ansible/`` directory overrides a
system-wide installation.
"""

import os

from ..logging_config import get_logger

logger = get_logger(__name__)

PLAYBOOK_CANDIDATES: tuple[str, ...] = (
    "ansible/playbook.yml",  # development checkout
    "../ansible/playbook.yml",  # parent directory
    "/usr/local/share/nanda-sdk/ansible/playbook.yml",  # system installation
    "/opt/nanda-sdk/ansible/playbook.yml",  # alternative system location
    "./ansible/playbook.yml",  # explicit current directory
)


def locate_playbook(candidates: tuple[str, ...] = PLAYBOOK_CANDIDATES) -> str:
    """Return the absolute path of the first existing candidate, or "" if none exist."""
    for candidate in candidates:
        if os.path.exists(candidate):
            return os.path.abspath(candidate)

    logger.debug("playbook_candidates_exhausted", candidates=list(candidates))
    return ""


def resolve_playbook(explicit_path: str | None = None) -> str:
    """Locate the playbook, checking an explicitly configured path first."""
    if explicit_path:
        if os.path.exists(explicit_path):
            return os.path.abspath(explicit_path)
        logger.warning("configured_playbook_missing", path=explicit_path)

    return locate_playbook()
