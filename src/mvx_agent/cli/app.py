"""CLI for the MultiversX agent actions - run wallet actions from the terminal."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

app = typer.Typer(
    name="mvx-agent",
    help="Operate a MultiversX wallet through chat-agent actions.",
    no_args_is_help=True,
)
console = Console()

_base_path: Path | None = None


def _version_callback(value: bool):
    if value:
        from importlib.metadata import version
        console.print(f"mvx-agent {version('mvx-agent-actions')}")
        raise typer.Exit()


@app.callback()
def main(
    directory: Path = typer.Option(
        None,
        "--dir",
        "-d",
        help="Directory holding .mvx-agent/ (default: current directory)",
        envvar="MVX_AGENT_DIR",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs"),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
):
    """Operate a MultiversX wallet through chat-agent actions."""
    global _base_path
    _base_path = directory
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, rich_tracebacks=True)],
    )
    # keep request lines out of the action output
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


def _run(coro):
    """Run an async function synchronously."""
    return asyncio.run(coro)


async def _load_plugin(payload: dict | None = None, *, offline: bool = True):
    """Build the plugin from the config on disk.

    With *offline* the language model is never needed: extraction uses
    *payload* (or nothing, for actions that extract nothing).
    """
    from mvx_agent.extraction import StaticIntentExtractor
    from mvx_agent.plugin import MultiversXPlugin

    extractor = StaticIntentExtractor(payload) if offline or payload is not None else None
    return await MultiversXPlugin.load(_base_path, extractor=extractor)


def _fail(message: str) -> None:
    console.print(f"[red]{message}[/red]")
    raise typer.Exit(1)


# ------------------------------------------------------------------
# Setup
# ------------------------------------------------------------------


@app.command()
def init(
    network: str = typer.Option("devnet", "--network", "-n", help="Network (devnet, testnet, mainnet)"),
    users: list[str] = typer.Option(None, "--user", "-u", help="Caller allowed to run privileged actions (repeatable)"),
    provider: str = typer.Option("anthropic", "--provider", "-p", help="LLM provider for intent extraction (anthropic or openai)"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing configuration"),
):
    """Write a starter .mvx-agent/config.yaml in the current directory."""
    from mvx_agent.config import (
        LLMConfig,
        LLMProviderConfig,
        default_config,
        get_config_dir,
        save_config,
    )
    from mvx_agent.errors import UnknownNetwork
    from mvx_agent.wallet.networks import resolve

    try:
        profile = resolve(network)
    except UnknownNetwork as e:
        _fail(str(e))

    config_dir = get_config_dir(_base_path, create=True)
    config_path = config_dir / "config.yaml"
    if config_path.exists() and not force:
        _fail(f"{config_path} already exists. Use --force to overwrite.")

    config = default_config()
    config.wallet.network = profile.name
    config.access.allowed_users = list(users or [])
    if provider == "openai":
        config.llm = LLMConfig(
            default_provider="openai",
            openai=LLMProviderConfig(
                api_key="${OPENAI_API_KEY}", model="gpt-4o", small_model="gpt-4o-mini"
            ),
        )
    elif provider != "anthropic":
        _fail(f"Unsupported provider '{provider}'. Use anthropic or openai.")

    save_config(config, config_path)
    console.print(Panel(
        f"[bold green]Configuration written[/bold green] to {config_path}\n\n"
        f"Network: [cyan]{profile.display_name}[/cyan]\n"
        f"Allowed users: {', '.join(config.access.allowed_users) or '[yellow]none[/yellow]'}\n\n"
        f"[dim]Export MVX_PRIVATE_KEY and the {config.llm.default_provider.upper()}_API_KEY "
        f"before running actions.[/dim]",
        title="mvx-agent",
    ))


@app.command()
def networks():
    """List the supported networks."""
    from mvx_agent.wallet.networks import NETWORKS

    table = Table(title="MultiversX Networks")
    table.add_column("Name", style="cyan")
    table.add_column("Chain ID")
    table.add_column("API")
    table.add_column("Explorer", style="dim")
    for profile in NETWORKS.values():
        table.add_row(profile.name, profile.chain_id, profile.api_url, profile.explorer_url)
    console.print(table)


# ------------------------------------------------------------------
# Wallet
# ------------------------------------------------------------------


@app.command()
def address():
    """Show the agent's wallet address."""

    async def _address():
        plugin = await _load_plugin()
        async with plugin:
            return plugin.wallet.get_address(), plugin.wallet.network.display_name

    try:
        addr, network_name = _run(_address())
    except Exception as e:
        _fail(f"Could not load the wallet: {e}")

    console.print(Panel(f"[cyan]{addr}[/cyan]\n\n[dim]{network_name}[/dim]", title="Wallet Address"))


@app.command()
def balance():
    """Show the agent's native balance."""
    from mvx_agent.wallet.transaction import format_amount

    async def _balance():
        plugin = await _load_plugin()
        async with plugin:
            network = plugin.wallet.network
            value = await plugin.wallet.get_balance()
            return format_amount(value, network.decimals, network.native_token), network.display_name

    try:
        formatted, network_name = _run(_balance())
    except Exception as e:
        _fail(f"Could not read the balance: {e}")

    console.print(f"[bold]{network_name}:[/bold] {formatted}")


# ------------------------------------------------------------------
# Actions
# ------------------------------------------------------------------


def _print_response(response) -> None:
    if response.is_error:
        console.print(Panel(response.text, title="[red]Error[/red]", border_style="red"))
        raise typer.Exit(1)
    console.print(Panel(response.text, title="[green]Done[/green]", border_style="green"))


@app.command()
def act(
    action_name: str = typer.Argument(help="Action name or simile (e.g. SEND_TOKEN)"),
    text: str = typer.Argument(help="The chat message that triggers the action"),
    user: str = typer.Option(..., "--user", "-u", help="Caller identity checked against the allow-list"),
    payload: str = typer.Option(None, "--payload", help="JSON payload to use instead of the language model"),
):
    """Run one action as if USER had sent TEXT in a chat."""
    from mvx_agent.actions import ActionRequest

    values = None
    if payload:
        try:
            values = json.loads(payload)
        except json.JSONDecodeError as e:
            _fail(f"--payload is not valid JSON: {e.msg}")
        if not isinstance(values, dict):
            _fail("--payload must be a JSON object")

    async def _act():
        plugin = await _load_plugin(values, offline=False)
        async with plugin:
            request = ActionRequest(caller_id=user, text=text)
            return await plugin.handle(action_name, request)

    try:
        response = _run(_act())
    except Exception as e:
        _fail(f"Could not start: {e}")
    _print_response(response)


@app.command()
def status(tx_hash: str = typer.Argument(help="Transaction hash")):
    """Look up a transaction's status."""
    from mvx_agent.actions import ActionRequest

    async def _status():
        plugin = await _load_plugin()
        async with plugin:
            request = ActionRequest(caller_id="cli", options={"tx_hash": tx_hash})
            return await plugin.handle("CHECK_TRANSACTION", request)

    try:
        response = _run(_status())
    except Exception as e:
        _fail(f"Could not start: {e}")
    _print_response(response)


@app.command()
def history(limit: int = typer.Option(20, "--limit", "-l", help="Number of transactions to show")):
    """Show recently submitted transactions from the journal."""

    async def _history():
        plugin = await _load_plugin()
        async with plugin:
            if plugin.journal is None:
                return None
            return await plugin.journal.list_recent(limit)

    try:
        records = _run(_history())
    except Exception as e:
        _fail(f"Could not read the journal: {e}")

    if records is None:
        console.print("[yellow]The transaction journal is disabled in the configuration.[/yellow]")
        return
    if not records:
        console.print("[dim]No transactions yet.[/dim]")
        return

    status_style = {"success": "green", "failed": "red", "timed_out": "yellow", "pending": "dim"}
    table = Table(title="Transactions")
    table.add_column("Submitted", style="dim")
    table.add_column("Action", style="cyan")
    table.add_column("Caller")
    table.add_column("Receiver")
    table.add_column("Value", justify="right")
    table.add_column("Status")
    table.add_column("Hash", style="dim")
    for r in records:
        style = status_style.get(r.status.value, "white")
        table.add_row(
            r.submitted_at.strftime("%Y-%m-%d %H:%M:%S"),
            r.action,
            r.caller_id,
            r.receiver[:12] + "…" + r.receiver[-6:],
            r.value,
            f"[{style}]{r.status.value}[/{style}]",
            r.tx_hash[:16] + "…",
        )
    console.print(table)
