import asyncio
import time

import typer
from rich.console import Console
from rich.table import Table

console = Console()
cli_app = typer.Typer(name="conf-admin", help="Conference administrative CLI")


def _run_async(coro):
    """Run async code from sync CLI context."""
    return asyncio.run(coro)


async def _ensure_db():
    from app.core.database import init_db
    await init_db()


@cli_app.command("create-token")
def create_token(
    email: str = typer.Option(..., "--email", help="Contact email the token acts as"),
    label: str = typer.Option("cli", "--label", help="Human-readable label for this token"),
    roles: int = typer.Option(0, "--roles", help="Role bits for a newly created contact (1=PC, 2=admin, 4=chair)"),
):
    """Create an API token for a contact, creating the contact if needed."""
    async def _create():
        await _ensure_db()
        from app.services.auth import AuthService
        service = AuthService()
        contact = await service.get_or_create_contact(email, roles=roles)
        raw_token, token_row = await service.create_token(contact.contact_id, label=label)
        return contact, raw_token, token_row

    contact, raw_token, token_row = _run_async(_create())

    console.print("\n[bold green]API token created successfully![/bold green]\n")
    console.print(f"  Contact: {contact.email} (#{contact.contact_id})")
    console.print(f"  Label:   {token_row.label}")
    console.print(f"  Prefix:  {token_row.token_prefix}")
    console.print(f"\n  [bold yellow]Token: {raw_token}[/bold yellow]")
    console.print("\n  [dim]Save this token now — it cannot be retrieved later.[/dim]\n")


@cli_app.command("revoke-token")
def revoke_token(
    token: str = typer.Argument(help="Full API token or token prefix to revoke"),
):
    """Revoke an API token."""
    async def _revoke():
        await _ensure_db()
        from app.services.auth import AuthService
        return await AuthService().revoke_token(token)

    if _run_async(_revoke()):
        console.print("[bold red]Token revoked successfully.[/bold red]")
    else:
        console.print(f"[yellow]No active token found matching '{token}'.[/yellow]")
        raise typer.Exit(code=1)


@cli_app.command("activity")
def activity(
    contact_id: int = typer.Option(..., "--contact", help="Contact id whose feed to show"),
    limit: int = typer.Option(20, "--limit", min=1, help="Number of items"),
    position: str = typer.Option(None, "--position", help="Resume position from a previous page"),
):
    """Show one page of a contact's activity feed."""
    async def _feed():
        await _ensure_db()
        from app.services.activity import build_feed
        from app.services.auth import AuthService
        from app.services.conf_settings import ConferenceSettings

        viewer = await AuthService().load_viewer(contact_id)
        conf = await ConferenceSettings().load()
        return await build_feed(viewer, position, limit, conf_settings=conf.snapshot(), now=int(time.time()))

    page = _run_async(_feed())

    if not page.items:
        console.print("[dim]No activity.[/dim]")
        return

    table = Table(title=f"Activity for contact #{contact_id}")
    table.add_column("When")
    table.add_column("Kind", style="cyan")
    table.add_column("Paper", style="green")
    table.add_column("By")

    for record in page.items:
        when = time.strftime("%Y-%m-%d %H:%M", time.gmtime(record.sort_time))
        table.add_row(when, record.kind.value, f"#{record.paper_id}", str(record.contact_id))

    console.print(table)
    if page.has_more and page.next_position:
        console.print(f"[dim]Next page: --position {page.next_position}[/dim]")


@cli_app.command("set-setting")
def set_setting(
    name: str = typer.Argument(help="Setting name"),
    value: int = typer.Argument(help="Integer value"),
    data: str = typer.Option(None, "--data", help="Optional text data"),
):
    """Create or update a conference setting."""
    async def _save():
        await _ensure_db()
        from app.services.conf_settings import ConferenceSettings
        conf = await ConferenceSettings().load()
        return await conf.save_setting(name, value, data)

    if _run_async(_save()):
        console.print(f"[bold green]Setting {name} saved.[/bold green]")
    else:
        console.print(f"[dim]Setting {name} unchanged.[/dim]")


@cli_app.command("show-settings")
def show_settings():
    """List all conference settings."""
    async def _load():
        await _ensure_db()
        from app.services.conf_settings import ConferenceSettings
        return await ConferenceSettings().load()

    conf = _run_async(_load())

    if not conf.values:
        console.print("[dim]No settings found.[/dim]")
        return

    table = Table(title="Conference Settings")
    table.add_column("Name", style="cyan")
    table.add_column("Value")
    table.add_column("Data")
    for name, value in sorted(conf.values.items()):
        table.add_row(name, str(value), conf.setting_data(name) or "")

    console.print(table)


def main():
    cli_app()


if __name__ == "__main__":
    main()
