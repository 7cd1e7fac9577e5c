import logging

import pytest
import structlog

from nanda_provisioner.config import Settings, get_settings
from nanda_provisioner.models import ProvisionConfig

SETTINGS_ENV_VARS = (
    "ANTHROPIC_API_KEY",
    "SMITHERY_API_KEY",
    "DOMAIN",
    "AGENT_ID",
    "NUM_AGENTS",
    "REGISTRY_URL",
    "VERBOSE",
    "PLAYBOOK_PATH",
    "ANSIBLE_EXECUTABLE",
    "PROVISIONING_TIMEOUT",
    "IP_LOOKUP_TIMEOUT",
    "SERVICE_NAME",
    "LOG_FORMAT",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Run every test in an empty directory with no provisioner env vars set."""
    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def reset_logging():
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def config() -> ProvisionConfig:
    return ProvisionConfig.create(
        domain="test.example.com",
        num_agents=2,
        registry_url="https://test-registry.com:6900",
        agent_id=123456,
    )


@pytest.fixture
def playbook(tmp_path):
    path = tmp_path / "playbooks" / "playbook.yml"
    path.parent.mkdir()
    path.write_text("- hosts: servers\n  tasks: []\n")
    return path


@pytest.fixture
def settings(playbook) -> Settings:
    return Settings(playbook_path=str(playbook), provisioning_timeout=60)
