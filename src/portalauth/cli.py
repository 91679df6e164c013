"""portalauth CLI - log in to form-driven portals over plain HTTP."""

import asyncio
from dataclasses import fields
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from portalauth.auth import authenticate_account
from portalauth.auth.result import AuthResult
from portalauth.config import ConfigError, find_account, global_config_path, load_accounts, load_settings
from portalauth.utils.debug import set_debug_enabled
from portalauth.utils.logging import configure_logging

app = typer.Typer(
    name="portalauth",
    help="HTTP-only login automation for identity provider portals",
    no_args_is_help=True,
)
console = Console()


@app.command()
def version() -> None:
    """Show the installed portalauth version."""
    from importlib.metadata import PackageNotFoundError, version as pkg_version

    try:
        current_version = pkg_version("portalauth")
    except PackageNotFoundError:
        current_version = "0.0.0+unknown"

    console.print(f"portalauth {current_version}")


@app.command()
def accounts() -> None:
    """List configured accounts (secrets are never shown)."""
    try:
        configured = load_accounts()
    except ConfigError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if not configured:
        console.print(f"[yellow]No accounts configured in {global_config_path()}[/yellow]")
        return

    table = Table(title="Accounts")
    table.add_column("Name", style="cyan")
    table.add_column("Username")
    table.add_column("Auth type")
    table.add_column("Secret", style="dim")
    for account in configured:
        if account.auth_type == "pictogram":
            secret = f"{len(account.pictogram_sequence)} pictures"
        else:
            secret = "***"
        table.add_row(account.name, account.username, account.auth_type, secret)
    console.print(table)


@app.command()
def login(
    name: str = typer.Argument(..., help="Account name from config.yml"),
    timeout: Optional[float] = typer.Option(None, "--timeout", "-t", help="Overall attempt timeout in seconds"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every step"),
    debug: bool = typer.Option(False, "--debug", help="Print step and form details"),
) -> None:
    """Run one login attempt for a configured account."""
    configure_logging(verbose)
    set_debug_enabled(debug)

    try:
        account = find_account(name)
        settings = load_settings()
    except ConfigError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    async def run_login() -> AuthResult:
        async with await authenticate_account(account, settings, timeout=timeout) as result:
            return result

    result = asyncio.run(run_login())
    _print_result(account.name, result)
    if not result.success:
        raise typer.Exit(1)


def _print_result(name: str, result: AuthResult) -> None:
    if result.success:
        lines = [
            f"[green]Authenticated {name}[/green]",
            f"Account ID: {result.account_id or '[yellow]not found[/yellow]'}",
            f"Signal: {result.success_signal}",
        ]
        style = "green"
    else:
        kind = result.error_kind.value if result.error_kind else "unknown"
        lines = [
            f"[red]Login failed for {name}[/red] ({kind})",
            f"{result.error.message if result.error else ''}",
        ]
        if result.error and result.error.last_check:
            lines.append(f"Last check: {result.error.last_check}")
        style = "red"
    lines.append(f"Steps: {result.steps}")
    lines.append(f"Last URL: {result.last_url or '-'}")
    console.print(Panel("\n".join(lines), title="Login", border_style=style))


config_app = typer.Typer(help="Inspect configuration", no_args_is_help=True)
app.add_typer(config_app, name="config")


@config_app.command("show")
def config_show() -> None:
    """Show effective auth settings."""
    try:
        settings = load_settings()
    except ConfigError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"[bold]Auth settings[/bold] [dim]({global_config_path()})[/dim]")
    for field in fields(settings):
        console.print(f"  {field.name}={getattr(settings, field.name)}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
