"""Mediator CLI -- run the server and moderate a running instance."""

from __future__ import annotations

import sys
from datetime import datetime, timezone
from typing import Optional

import click
import httpx
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from mediator import __version__

console = Console()


def _client(url: str, admin_key: Optional[str]) -> httpx.Client:
    headers = {"x-admin-key": admin_key} if admin_key else {}
    return httpx.Client(base_url=url, headers=headers, timeout=10.0)


def _request(ctx: click.Context, method: str, path: str, **kwargs) -> dict:
    """Call the server; print the error detail and exit 1 on failure."""
    with _client(ctx.obj["url"], ctx.obj["admin_key"]) as client:
        try:
            resp = client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            console.print(f"[red]Request failed:[/] {e}")
            sys.exit(1)
    if resp.is_error:
        try:
            detail = resp.json().get("detail", resp.text)
        except ValueError:
            detail = resp.text
        console.print(f"[red]Error {resp.status_code}:[/] {detail}")
        sys.exit(1)
    return resp.json()


def _fmt_ms(ms: Optional[int]) -> str:
    if ms is None:
        return "never"
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


@click.group()
@click.version_option(version=__version__)
@click.option("--url", envvar="MEDIATOR_URL", default="http://localhost:3001", help="Server base URL")
@click.option("--admin-key", envvar="ADMIN_KEY", default=None, help="Admin key (x-admin-key)")
@click.pass_context
def main(ctx: click.Context, url: str, admin_key: Optional[str]):
    """Mediator -- anonymous 1:1 chat relay.

    Runs the relay server and talks to a running instance's admin API to
    review reports and manage mutes and bans.
    """
    ctx.ensure_object(dict)
    ctx.obj["url"] = url
    ctx.obj["admin_key"] = admin_key


# ── Server ───────────────────────────────────────────────────────────


@main.command()
@click.option("--config", "-c", "config_path", default=None, help="YAML config file")
@click.option("--host", default=None, help="Bind address (overrides config)")
@click.option("--port", default=None, type=int, help="Port (overrides config)")
def serve(config_path: Optional[str], host: Optional[str], port: Optional[int]):
    """Run the mediator server."""
    import os

    import uvicorn

    from mediator.config import configure_logging, load_settings

    if config_path:
        os.environ["MEDIATOR_CONFIG"] = config_path
    settings = load_settings()
    configure_logging(settings.log_level)

    console.print(f"\n[bold blue]Mediator[/] — listening on {host or settings.host}:{port or settings.port}\n")
    uvicorn.run(
        "web.backend.app.main:app",
        host=host or settings.host,
        port=port or settings.port,
        log_level=settings.log_level.lower(),
    )


# ── Reports ──────────────────────────────────────────────────────────


@main.command()
@click.pass_context
def reports(ctx: click.Context):
    """List abuse reports."""
    items = _request(ctx, "GET", "/api/admin/reports")["reports"]
    if not items:
        console.print("[yellow]No reports.[/]")
        return

    table = Table(title=f"Reports ({len(items)})")
    table.add_column("ID", style="cyan")
    table.add_column("Received")
    table.add_column("IP")
    table.add_column("Reason")

    for r in items:
        table.add_row(r["id"], _fmt_ms(r.get("createdAt")), r.get("ip", ""), str(r.get("reason", ""))[:50])

    console.print(table)


@main.command()
@click.argument("report_id")
@click.pass_context
def report(ctx: click.Context, report_id: str):
    """Show one report in full."""
    r = _request(ctx, "GET", f"/api/admin/reports/{report_id}")
    lines = [f"[bold]{k}[/]: {v}" for k, v in r.items()]
    console.print(Panel("\n".join(lines), title=f"Report {report_id}"))


# ── Sanctions ────────────────────────────────────────────────────────


@main.command()
@click.pass_context
def banned(ctx: click.Context):
    """List every sanction record, expired ones included."""
    items = _request(ctx, "GET", "/api/admin/banned")["banned"]
    if not items:
        console.print("[yellow]No sanctions.[/]")
        return

    table = Table(title=f"Sanctions ({len(items)})")
    table.add_column("IP", style="cyan")
    table.add_column("Status")
    table.add_column("Class")
    table.add_column("Expires")
    table.add_column("History", justify="right")

    for s in items:
        table.add_row(s["ip"], s["status"], s.get("banType") or "", _fmt_ms(s.get("expiresAt")), str(len(s.get("history", []))))

    console.print(table)


@main.command()
@click.argument("ip")
@click.argument("sanction_type", type=click.Choice(["15m", "3d", "forever"]))
@click.pass_context
def sanction(ctx: click.Context, ip: str, sanction_type: str):
    """Mute (15m) or ban (3d, forever) an IP, replacing any current sanction."""
    s = _request(ctx, "POST", "/api/admin/sanction", json={"ip": ip, "type": sanction_type})["sanction"]
    console.print(f"  [green]v[/] {s['ip']}: {s['status']} ({s['banType']}) until {_fmt_ms(s.get('expiresAt'))}")


@main.command()
@click.argument("ip")
@click.pass_context
def unban(ctx: click.Context, ip: str):
    """Remove all sanction state for an IP."""
    _request(ctx, "POST", "/api/admin/unban", json={"ip": ip})
    console.print(f"  [green]v[/] {ip} cleared")


@main.command()
@click.pass_context
def status(ctx: click.Context):
    """Show the sanction status of this machine's address."""
    s = _request(ctx, "GET", "/api/sanction/me")
    if not s.get("active"):
        console.print("[green]No active sanction.[/]")
        return
    console.print(f"[red]{s['status']}[/] ({s['banType']}) until {_fmt_ms(s.get('expiresAt'))}")


if __name__ == "__main__":
    main()
