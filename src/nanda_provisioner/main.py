from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
import typer

from .config import DEFAULT_SMITHERY_API_KEY, get_settings
from .exceptions import ProvisionError
from .logging_config import setup_logging
from .models import ProvisionConfig
from .provisioner import ProvisionNode

app = typer.Typer(
    name="nanda-provisioner",
    help=(
        "Set up an Internet of Agents server. Configures the host with DNS records, "
        "SSL certificates and the NANDA agent software via Ansible."
    ),
    add_completion=False,
)
console = Console()


def _fail(message: str) -> None:
    console.print(f"[red]Error:[/red] {escape(message)}")
    raise typer.Exit(code=1)


def _describe_settings_error(error: ValidationError) -> str:
    problems = []
    for err in error.errors():
        field = ".".join(str(part) for part in err["loc"]).upper()
        problems.append(f"{field}: {err['msg']}")
    return "invalid configuration (" + "; ".join(problems) + ")"


@app.command()
def setup(
    anthropic_key: str | None = typer.Option(
        None, "--anthropic-key", help="Anthropic API key for the agent (required)"
    ),
    domain: str | None = typer.Option(
        None, "--domain", help="Complete domain name (e.g., myapp.example.com) (required)"
    ),
    smithery_key: str | None = typer.Option(
        None, "--smithery-key", help="Optional Smithery API key for the MCP connections"
    ),
    agent_id: int | None = typer.Option(
        None, "--agent-id", help="Optional agent ID (if not provided, will generate one)"
    ),
    num_agents: int | None = typer.Option(
        None, "--num-agents", help="Number of agents (defaults to one)"
    ),
    registry_url: str | None = typer.Option(
        None, "--registry-url", help="URL of the NANDA registry"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", help="Enable verbose output for Ansible playbook"
    ),
):
    """Provision this host for running NANDA agents.

    Every option falls back to its environment variable (or .env entry):
    ANTHROPIC_API_KEY, DOMAIN, SMITHERY_API_KEY, AGENT_ID, NUM_AGENTS,
    REGISTRY_URL, VERBOSE.
    """
    try:
        settings = get_settings()
    except ValidationError as e:
        _fail(_describe_settings_error(e))

    setup_logging()

    anthropic_key = anthropic_key or settings.anthropic_api_key
    domain = domain or settings.domain
    smithery_key = smithery_key or settings.smithery_api_key or DEFAULT_SMITHERY_API_KEY
    agent_id = settings.agent_id if agent_id is None else agent_id
    num_agents = settings.num_agents if num_agents is None else num_agents
    registry_url = registry_url or settings.registry_url
    verbose = verbose or settings.verbose

    if not anthropic_key:
        _fail(
            "anthropic API key is required (set ANTHROPIC_API_KEY in .env or use --anthropic-key)"
        )
    if not domain:
        _fail("domain is required (set DOMAIN in .env or use --domain)")

    try:
        config = ProvisionConfig.create(
            domain=domain,
            num_agents=num_agents,
            registry_url=registry_url,
            agent_id=agent_id,
        )
    except ValueError as e:
        _fail(str(e))

    try:
        ProvisionNode(config, settings=settings).setup(anthropic_key, smithery_key, verbose)
    except ProvisionError as e:
        console.print(f"[red]Setup failed:[/red] {escape(str(e))}")
        raise typer.Exit(code=1) from e

    console.print("[green]Setup completed successfully[/green]")


if __name__ == "__main__":
    app()
