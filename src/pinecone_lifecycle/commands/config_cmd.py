"""Config commands — project profiles and where they point."""

from __future__ import annotations

from typing import Annotated, Any, Optional

import typer
from rich.console import Console
from rich.prompt import Confirm

from pinecone_lifecycle.client.errors import error_handler
from pinecone_lifecycle.commands import _common
from pinecone_lifecycle.config.constants import DEFAULT_CONTROLLER_URL
from pinecone_lifecycle.config.manager import ConfigManager
from pinecone_lifecycle.config.models import ProjectProfile
from pinecone_lifecycle.output.formatter import output

app = typer.Typer(name="config", help="Manage project profiles and CLI configuration.")
console = Console()

FormatOpt = Annotated[str, typer.Option("--format", "-f", help="Output format")]


def _mask(secret: str) -> str:
    return secret[:4] + "..." if len(secret) > 8 else "***"


def _profile_record(profile: ProjectProfile, default: str | None) -> dict[str, Any]:
    """Profile fields safe to print: the API key is masked."""
    record = profile.model_dump(exclude_none=True)
    if profile.api_key:
        record["api_key"] = _mask(profile.api_key)
    record["default"] = profile.name == default
    return record


def _require_profile(mgr: ConfigManager, name: str) -> ProjectProfile:
    profile = mgr.get_profile(name)
    if profile is None:
        console.print(f"[red]Profile '{name}' not found.[/]")
        raise typer.Exit(1)
    return profile


@app.command()
@error_handler
def add(
    name: Annotated[str, typer.Argument(help="Profile name")],
    api_key: Annotated[str, typer.Option("--api-key", "-k", help="Project API key")],
    url: Annotated[
        str, typer.Option("--url", "-u", help="Control plane URL"),
    ] = DEFAULT_CONTROLLER_URL,
    no_verify_ssl: Annotated[bool, typer.Option("--no-verify-ssl", help="Disable SSL verification")] = False,
    make_default: Annotated[bool, typer.Option("--default", help="Make this the default profile")] = False,
) -> None:
    """Add or replace a project profile."""
    mgr = _common._get_manager()
    mgr.add_profile(
        ProjectProfile(name=name, url=url, api_key=api_key, verify_ssl=not no_verify_ssl),
        make_default=make_default,
    )
    console.print(f"[green]Profile '{name}' added[/] ({mgr.config_path}).")


@app.command("list")
@error_handler
def list_profiles(fmt: FormatOpt = "table") -> None:
    """List configured profiles, with keys masked."""
    mgr = _common._get_manager()
    if not mgr.config.profiles:
        console.print(
            "[yellow]No profiles configured. Run 'pinecone-lifecycle config add'"
            " to get started.[/]"
        )
        return
    for profile in mgr.config.profiles.values():
        output(
            _profile_record(profile, mgr.config.default_profile),
            fmt,
            title=f"Profile: {profile.name}",
        )


@app.command()
@error_handler
def show(
    name: Annotated[str, typer.Argument(help="Profile name")],
    fmt: FormatOpt = "table",
) -> None:
    """Show one profile."""
    mgr = _common._get_manager()
    profile = _require_profile(mgr, name)
    output(_profile_record(profile, mgr.config.default_profile), fmt, title=f"Profile: {name}")


@app.command("set-default")
@error_handler
def set_default(
    name: Annotated[str, typer.Argument(help="Profile used when --profile is not given")],
) -> None:
    """Choose the default project profile."""
    mgr = _common._get_manager()
    _require_profile(mgr, name)
    mgr.set_default(name)
    console.print(f"[green]Default profile set to '{name}'.[/]")


@app.command()
@error_handler
def test(
    name: Annotated[Optional[str], typer.Argument(help="Profile name (uses default if omitted)")] = None,
) -> None:
    """Check the API key by listing the project's indexes."""
    from pinecone_lifecycle.client.control_plane import ControlPlaneClient

    profile = _common._get_manager().resolve_project(profile_name=name)
    console.print(f"Listing indexes at [bold]{profile.url}[/]...")
    with ControlPlaneClient(profile) as client:
        count = len(client.list_indexes())
    console.print(f"[green]Connected.[/] {count} index(es) visible.")


@app.command()
@error_handler
def remove(
    name: Annotated[str, typer.Argument(help="Profile name to remove")],
    force: Annotated[bool, typer.Option("--force", "-f", help="Skip confirmation")] = False,
) -> None:
    """Delete a project profile from the config file."""
    mgr = _common._get_manager()
    _require_profile(mgr, name)
    if not force and not Confirm.ask(f"Remove profile '{name}'?"):
        console.print("Cancelled.")
        return
    mgr.remove_profile(name)
    console.print(f"[green]Profile '{name}' removed.[/]")
