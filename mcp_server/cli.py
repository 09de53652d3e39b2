"""MCP Server CLI — run the server and inspect context descriptors."""

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from mcp_server import __version__

console = Console()

CONTEXT_PATH_HELP = "Directory of context descriptor files (default: $CONTEXT_PATH or ./contexts)"


def _load_registry(context_path: str | None):
    from mcp_server.config import ServerConfig
    from mcp_server.contexts.registry import ContextRegistry

    return ContextRegistry(context_path or ServerConfig.from_env().context_path)


def _contexts_table(title: str, contexts) -> Table:
    table = Table(title=title)
    table.add_column("ID", style="cyan")
    table.add_column("Type")
    table.add_column("Auth", justify="center")
    table.add_column("Capabilities")
    table.add_column("Description")

    for ctx in contexts:
        auth = "[yellow]Y[/]" if ctx.auth_required else "[green]N[/]"
        table.add_row(ctx.id, ctx.type.value, auth, ", ".join(ctx.capabilities), ctx.description[:50])
    return table


@click.group()
@click.version_option(version=__version__)
def main():
    """MCP Server — context registry, agents and market data for Solana.

    Serves context descriptors over REST, routes agent instructions and
    proxies market data from CoinGecko and Binance.
    """


# ── Serve ────────────────────────────────────────────────────────────


@main.command()
@click.option("--host", default=None, help="Bind address (default: $HOST or localhost)")
@click.option("--port", default=None, type=int, help="Port (default: $PORT or 3000)")
@click.option("--context-path", "-c", default=None, help=CONTEXT_PATH_HELP)
def serve(host: str | None, port: int | None, context_path: str | None):
    """Run the HTTP / WebSocket server."""
    import uvicorn

    from mcp_server.config import ServerConfig
    from mcp_server.logging_config import configure_logging
    from mcp_server.web.app import create_app

    config = ServerConfig.from_env()
    if host:
        config.host = host
    if port:
        config.port = port
    if context_path:
        config.context_path = context_path

    configure_logging(config.log_level, config.log_format, config.env)
    console.print(f"\n[bold blue]MCP[/] — Serving on http://{config.host}:{config.port}\n")

    uvicorn.run(create_app(config), host=config.host, port=config.port, log_config=None)


# ── Validate ─────────────────────────────────────────────────────────


@main.command()
@click.argument("descriptor_paths", nargs=-1, required=True)
def validate(descriptor_paths: tuple):
    """Validate one or more context descriptor files."""
    from mcp_server.contexts.descriptor import DescriptorError, load_descriptor_file

    failed = 0
    for path in descriptor_paths:
        try:
            ctx = load_descriptor_file(path)
        except DescriptorError as e:
            failed += 1
            console.print(f"  [red]x[/] {escape(str(e))}")
            continue
        console.print(f"  [green]v[/] {path}: {ctx.id} ({ctx.type.value})")

    if failed:
        raise SystemExit(1)
    console.print("\n[green]Valid![/]")


# ── Contexts ─────────────────────────────────────────────────────────


@main.group()
def contexts():
    """Inspect the context registry."""


@contexts.command(name="list")
@click.option("--context-path", "-c", default=None, help=CONTEXT_PATH_HELP)
@click.option("--type", "-t", "context_type", default=None, help="Only show this context type")
def list_contexts(context_path: str | None, context_type: str | None):
    """List all loaded contexts."""
    reg = _load_registry(context_path)

    if context_type:
        entries = reg.list_by_type(context_type)
        if entries is None:
            console.print(f"[red]Invalid context type:[/] {context_type}")
            raise SystemExit(2)
    else:
        entries = reg.list_all()

    if not entries:
        console.print("[yellow]No contexts found.[/]")
        return

    console.print(_contexts_table(f"Contexts ({len(entries)})", entries))


@contexts.command()
@click.argument("context_id")
@click.option("--context-path", "-c", default=None, help=CONTEXT_PATH_HELP)
def show(context_id: str, context_path: str | None):
    """Show one context in full."""
    import json

    from mcp_server.contexts.descriptor import definition_to_dict

    reg = _load_registry(context_path)
    ctx = reg.get(context_id)
    if ctx is None:
        console.print(f"[red]Context not found:[/] {context_id}")
        raise SystemExit(1)

    console.print(Panel(escape(json.dumps(definition_to_dict(ctx), indent=2)), title=ctx.name))


@contexts.command()
@click.argument("capabilities", nargs=-1)
@click.option("--context-path", "-c", default=None, help=CONTEXT_PATH_HELP)
def find(capabilities: tuple, context_path: str | None):
    """Find contexts offering every given capability."""
    reg = _load_registry(context_path)
    matches = reg.find_by_capabilities(list(capabilities))

    if not matches:
        console.print("[yellow]No matching contexts found.[/]")
        return

    for ctx in matches:
        console.print(f"  [cyan]{ctx.id}[/] ({ctx.type.value})")
        console.print(f"    {ctx.description}")


if __name__ == "__main__":
    main()
