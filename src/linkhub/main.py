"""CLI entry point."""

import asyncio
import logging

import click

from .config import Config, Session
from .exceptions import AuthenticationRequired, LinkHubError, LinkNotFoundError
from .intents import Intent, IntentAction, IntentDispatcher
from .storage.models import Link
from .sync.engine import SyncEngine

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

RELOGIN_HINT = "Run 'linkhub login' to update your credentials."


def _open_engine(config_path: str) -> SyncEngine:
    """Build an engine from the config file and the saved session."""
    cfg = Config.from_yaml(config_path)
    session = cfg.load_session()
    if not session.is_complete:
        raise click.ClickException(f"Not logged in. {RELOGIN_HINT}")
    return SyncEngine.from_config(cfg, session)


def _run(
    engine: SyncEngine, intent: Intent | None = None, must_exist: bool = False
) -> list[Link]:
    """Load the remote list, apply one intent, and return the list to show."""

    async def go() -> list[Link]:
        await engine.load()
        if must_exist and intent is not None:
            link_id = intent.link_id or ""
            if engine.repository.get(link_id) is None:
                raise LinkNotFoundError(link_id)
        if intent is None:
            return engine.state.visible_links()
        return await IntentDispatcher(engine).dispatch(intent)

    try:
        return asyncio.run(go())
    except AuthenticationRequired as e:
        raise click.ClickException(f"{e}\n{RELOGIN_HINT}")
    except (LinkHubError, ValueError) as e:
        raise click.ClickException(str(e))


def _echo_link(link: Link) -> None:
    click.echo(f"[{link.id}] {link.title}")
    click.echo(f"  {link.url}")
    if link.tags:
        click.echo(f"  Tags: {', '.join(link.tags)}")
    if link.notes:
        click.echo(f"  Notes: {link.notes}")
    click.echo()


def _echo_links(links: list[Link], query: str = "") -> None:
    if not links:
        if query:
            click.echo(f"No links match '{query}'.")
        else:
            click.echo("No links saved yet. Use 'linkhub add' to add one.")
        return
    click.echo(f"{len(links)} links:\n")
    for link in links:
        _echo_link(link)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """LinkHub - Bookmarks stored as a JSON file in your GitHub repository."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


@cli.command()
@click.option("--config", "-c", default="config.yaml", help="Config file path")
@click.option("--username", "-u", prompt="GitHub username", help="GitHub username")
@click.option(
    "--token", "-t", prompt="GitHub token", hide_input=True, help="Personal access token"
)
@click.option("--repo", "-r", prompt="Repository name", help="Repository holding the link file")
def login(config: str, username: str, token: str, repo: str) -> None:
    """Save GitHub credentials and check that the link file can be read."""
    cfg = Config.from_yaml(config)
    session = Session(username=username.strip(), token=token.strip(), repo_name=repo.strip())
    if not session.is_complete:
        raise click.ClickException("Username, token and repository are all required.")
    session.save(cfg.session_path)

    links = _run(SyncEngine.from_config(cfg, session))
    click.echo(f"Logged in as {session.username}, {len(links)} links in {session.repo_name}.")


@cli.command("list")
@click.option("--config", "-c", default="config.yaml", help="Config file path")
@click.option("--search", "-s", "query", default="", help="Filter by title, tag or notes")
def list_links(config: str, query: str) -> None:
    """List saved links, newest first."""
    engine = _open_engine(config)
    links = _run(engine, Intent(IntentAction.SEARCH, query=query))
    _echo_links(links, query)


@cli.command()
@click.option("--config", "-c", default="config.yaml", help="Config file path")
@click.option("--title", prompt="Title", help="Link title")
@click.option("--url", prompt="URL", help="Link URL")
@click.option("--tags", default="", help="Comma-separated tags")
@click.option("--notes", default="", help="Free-text notes")
def add(config: str, title: str, url: str, tags: str, notes: str) -> None:
    """Add a new link."""
    engine = _open_engine(config)
    fields = {"title": title, "url": url, "tags": tags, "notes": notes}
    _run(engine, Intent(IntentAction.CREATE, fields=fields))
    click.echo(f"Added '{title.strip()}'.")


@cli.command()
@click.argument("link_id")
@click.option("--config", "-c", default="config.yaml", help="Config file path")
@click.option("--title", default=None, help="New title")
@click.option("--url", default=None, help="New URL")
@click.option("--tags", default=None, help="New comma-separated tags")
@click.option("--notes", default=None, help="New notes")
def edit(
    link_id: str,
    config: str,
    title: str | None,
    url: str | None,
    tags: str | None,
    notes: str | None,
) -> None:
    """Edit an existing link; only the given fields change."""
    fields = {
        name: value
        for name, value in (("title", title), ("url", url), ("tags", tags), ("notes", notes))
        if value is not None
    }
    if not fields:
        raise click.UsageError("Nothing to change. Pass --title, --url, --tags or --notes.")

    engine = _open_engine(config)
    _run(engine, Intent(IntentAction.EDIT, link_id=link_id, fields=fields))
    click.echo(f"Updated {link_id}.")


@cli.command()
@click.argument("link_id")
@click.option("--config", "-c", default="config.yaml", help="Config file path")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
def delete(link_id: str, config: str, yes: bool) -> None:
    """Delete a link."""
    if not yes:
        click.confirm(f"Delete link {link_id}?", abort=True)
    engine = _open_engine(config)
    _run(engine, Intent(IntentAction.DELETE, link_id=link_id), must_exist=True)
    click.echo(f"Deleted {link_id}.")


@cli.command()
@click.option("--config", "-c", default="config.yaml", help="Config file path")
def tags(config: str) -> None:
    """List all tags with counts."""
    engine = _open_engine(config)
    _run(engine)
    all_tags = engine.repository.all_tags()

    if not all_tags:
        click.echo("No tags found.")
        return

    click.echo("Tags:\n")
    for name, count in all_tags:
        click.echo(f"  {name}: {count} links")


@cli.command()
@click.option("--config", "-c", default="config.yaml", help="Config file path")
@click.option("--host", default="127.0.0.1", help="Host to bind")
@click.option("--port", "-p", default=5001, type=int, help="Port to bind")
@click.option("--debug/--no-debug", default=False, help="Enable debug mode")
def web(config: str, host: str, port: int, debug: bool) -> None:
    """Start the web interface."""
    from .web.app import create_app

    app = create_app(config)
    click.echo(f"Starting web interface at http://{host}:{port}")
    app.run(host=host, port=port, debug=debug)


if __name__ == "__main__":
    cli()
