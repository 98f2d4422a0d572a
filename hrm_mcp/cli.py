import asyncio
import json
import sys

import typer
from loguru import logger

from .modules.mcp.config import settings
from .modules.mcp.models import CallerContext
from .modules.mcp.selector import select_relevant_tools, tool_selection_stats
from .modules.mcp.tools import list_tools

app = typer.Typer(help="HRM MCP tool service")


def _dispatcher():
    from .di import get_dispatcher

    return get_dispatcher()


@app.command()
def serve(
    host: str = typer.Option(settings.api_host, help="Bind address"),
    port: int = typer.Option(settings.api_port, help="Port"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
) -> None:
    """Run the HTTP API."""
    import uvicorn

    uvicorn.run("hrm_mcp.main:app", host=host, port=port, reload=reload)


@app.command()
def stdio() -> None:
    """Run the MCP server on stdin/stdout (logs go to stderr)."""
    from .modules.mcp.server import serve_stdio

    asyncio.run(serve_stdio(_dispatcher()))


@app.command()
def tools(compact: bool = typer.Option(False, help="Trim descriptions and schema docs")) -> None:
    """Print the tool catalog as JSON."""
    typer.echo(json.dumps(list_tools(compact=compact), indent=2))


@app.command()
def select(query: str = typer.Argument(..., help="User message")) -> None:
    """Show which tools a chat message would receive."""
    selected = select_relevant_tools(query)
    stats = tool_selection_stats(query)
    typer.echo(f"Selected {stats['selectedCount']}/{stats['totalCount']} tools "
               f"(~{stats['tokensEstimate']} tokens), categories: {', '.join(stats['categories']) or '-'}")
    for tool in selected:
        typer.echo(f"  - {tool.name}")


@app.command()
def query(sql: str = typer.Argument(..., help="A single SELECT statement")) -> None:
    """Run a guarded SELECT and print the formatted result."""
    response = _dispatcher().execute("execute_sql_query", {"query": sql}, CallerContext.cli())
    typer.echo(response.first_text, err=response.isError)
    if response.isError:
        raise typer.Exit(code=1)


@app.command()
def call(
    name: str = typer.Argument(..., help="Tool name"),
    arguments: str = typer.Option("{}", "--args", help="Tool arguments as a JSON object"),
    provider: str = typer.Option(None, help="AI provider for report tools"),
) -> None:
    """Call any catalog tool through the dispatcher."""
    try:
        parsed = json.loads(arguments)
    except json.JSONDecodeError as exc:
        typer.echo(f"--args is not valid JSON: {exc}", err=True)
        raise typer.Exit(code=2) from exc

    response = _dispatcher().execute(name, parsed, CallerContext.cli(), provider=provider)
    typer.echo(response.first_text, err=response.isError)
    if response.isError:
        raise typer.Exit(code=1)


@app.command("init-db")
def init_db_command() -> None:
    """Create missing HRM tables (development databases only)."""
    from .di import get_engine
    from .modules.hrm.db import init_db

    init_db(get_engine())


def main() -> None:
    logger.remove()
    logger.add(sys.stderr, level=settings.log_level.upper())
    app()


if __name__ == "__main__":
    main()
