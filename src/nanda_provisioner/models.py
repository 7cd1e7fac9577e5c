"""Pydantic models for a provisioning run."""

from dataclasses import dataclass
from pathlib import Path
import random

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .logging_config import get_logger

logger = get_logger(__name__)

GITHUB_REPO = "https://github.com/aidecentralized/nanda-agent.git"

AGENT_ID_MIN = 100000
AGENT_ID_MAX = 999999

# Values rendered into the INI inventory must stay on one line
SINGLE_TOKEN_PATTERN = r"^[^\s\x00-\x1f\x7f]+$"


def generate_agent_id(rng: random.Random | None = None) -> int:
    """Return a random 6-digit agent ID.

    Uses the given generator, or a freshly seeded local one. The module-level
    ``random`` state is never touched.
    """
    rng = rng or random.Random()
    return rng.randint(AGENT_ID_MIN, AGENT_ID_MAX)


class ProvisionConfig(BaseModel):
    """Immutable inputs for one provisioning run.

    Build it with :meth:`create` so that ``agent_id=0`` is resolved to a
    generated ID.
    """

    model_config = ConfigDict(frozen=True)

    domain: str = Field(
        ...,
        min_length=1,
        pattern=SINGLE_TOKEN_PATTERN,
        description="Complete domain name of the host",
    )
    agent_id: int = Field(..., gt=0, description="Agent ID prefix")
    num_agents: int = Field(1, ge=1, description="Number of agents to run")
    registry_url: str = Field(
        ..., pattern=SINGLE_TOKEN_PATTERN, description="URL of the NANDA registry"
    )

    @field_validator("domain", mode="before")
    @classmethod
    def strip_domain(cls, v: str) -> str:
        return v.strip() if isinstance(v, str) else v

    @classmethod
    def create(
        cls,
        domain: str,
        num_agents: int,
        registry_url: str,
        agent_id: int = 0,
        rng: random.Random | None = None,
    ) -> "ProvisionConfig":
        if agent_id < 0:
            raise ValueError(f"agent_id must be positive or 0 to generate one, got {agent_id}")
        if agent_id == 0:
            agent_id = generate_agent_id(rng)

        config = cls(
            domain=domain,
            agent_id=agent_id,
            num_agents=num_agents,
            registry_url=registry_url,
        )
        logger.info(
            "provision_config_created",
            agent_id=config.agent_id,
            domain=config.domain,
            num_agents=config.num_agents,
            registry_url=config.registry_url,
        )
        return config


class GroupVars(BaseModel):
    """Ansible group variables written to ``group_vars/all.yml``.

    Field order is the order keys appear in the YAML document.
    """

    anthropic_api_key: str
    smithery_api_key: str
    domain_name: str
    agent_id_prefix: int
    github_repo: str = GITHUB_REPO
    num_agents: int
    registry_url: str

    @field_validator("github_repo")
    @classmethod
    def pin_github_repo(cls, v: str) -> str:
        if v != GITHUB_REPO:
            raise ValueError(f"github_repo is fixed to {GITHUB_REPO}")
        return v


@dataclass
class ProvisionResult:
    """Outcome of a single ansible-playbook invocation."""

    success: bool
    output: str
    error: Exception | None = None


@dataclass
class ProvisionArtifacts:
    """Files created for a run, tracked so cleanup can remove them."""

    work_dir: Path
    inventory_path: Path | None = None
    group_vars_dir: Path | None = None
    group_vars_path: Path | None = None
