import asyncio
import logging
import sys
from typing import Optional

import click
from dotenv import load_dotenv

from coprctl.application.copr_service import CoprService
from coprctl.domain.exceptions import CoprException
from coprctl.domain.identifiers import parse_project_spec
from coprctl.infrastructure.config import (
    CoprConfig,
    config_dir_from_env,
    hub_from_env,
    repos_dir_from_env,
)
from coprctl.infrastructure.copr_client import CoprClient
from coprctl.infrastructure.repo_files import RepoFileStore

logger = logging.getLogger(__name__)

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])

COPR_THIRD_PARTY_WARNING = """\
Enabling a Copr repository. Please note that this repository is not part
of the main distribution, and quality may vary.

The Fedora Project does not exercise any power over the contents of
this repository beyond the rules outlined in the Copr FAQ at
<https://docs.pagure.org/copr.copr/user_documentation.html#what-i-can-build-in-copr>,
and packages are not held to any quality or security level.

Please do not file bug reports about these packages in Fedora
Bugzilla. In case of problems, contact the owner of this repository.
"""


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[
            logging.StreamHandler(sys.stderr)
        ]
    )


def build_service(hubspec: str) -> CoprService:
    config = CoprConfig.load(config_dir_from_env())
    environment = config.environment(hubspec)
    return CoprService(
        copr_client=CoprClient(hub_url=config.get_hub_url(hubspec)),
        repo_store=RepoFileStore(repos_dir=repos_dir_from_env()),
        environment=environment,
    )


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option("--hub", "hub", default=None, metavar="HOSTNAME", help="Copr hub (web-UI) hostname or alias.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, hub: Optional[str], verbose: bool) -> None:
    """Manage Copr repositories (community add-ons)."""
    configure_logging(verbose)
    ctx.obj = hub


@cli.command("enable")
@click.argument("project_spec")
@click.argument("chroot", required=False)
@click.pass_obj
def enable_cmd(hub_option: Optional[str], project_spec: str, chroot: Optional[str]) -> None:
    """Enable the Copr project PROJECT_SPEC.

    PROJECT_SPEC is OWNER/PROJECT or HUB/OWNER/PROJECT. OWNER is a username
    or a @groupname, PROJECT may be a project directory like
    'project:custom:123'. CHROOT (e.g. 'fedora-rawhide-ppc64le') is detected
    when not given.
    """
    try:
        hub, owner, dirname = parse_project_spec(project_spec)
        service = build_service(hub or hub_option or hub_from_env())
        click.echo(COPR_THIRD_PARTY_WARNING, err=True)
        path = asyncio.run(service.enable(owner, dirname, chroot))
    except CoprException as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Repository file {path} written.")


@cli.command("list")
@click.option("--installed/--available", "installed_only", default=True,
              help="List installed Copr repositories (default).")
@click.pass_obj
def list_cmd(hub_option: Optional[str], installed_only: bool) -> None:
    """List Copr repositories."""
    service = build_service(hub_option or hub_from_env())
    hub_hostname = service.environment.hub_hostname if hub_option else None
    try:
        repository_sets = service.list_repositories(installed_only, hub_hostname)
    except CoprException as e:
        raise click.ClickException(str(e)) from e
    for repository_set in repository_sets:
        line = repository_set.id
        if not repository_set.enabled:
            line += " (disabled)"
        click.echo(line)


@cli.command("debug")
@click.pass_obj
def debug_cmd(hub_option: Optional[str]) -> None:
    """Print the detected hub and system settings."""
    service = build_service(hub_option or hub_from_env())
    for line in service.debug_lines():
        click.echo(line)


def main() -> None:
    # Load environment variables from .env file
    load_dotenv()
    cli()


if __name__ == "__main__":
    main()
