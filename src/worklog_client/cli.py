"""CLI entry point for worklog-client."""

import asyncio
import logging
from functools import wraps

import click

from .client import WorklogClient
from .controller import ProfileController, WorklogListController
from .core import ActionKind, WorklogRecord
from .display import page_to_table, profile_to_text, record_to_text
from .errors import SessionExpired, ValidationError, WorklogError
from .storage import FileSessionStore, SessionStore

logger = logging.getLogger(__name__)


def _make_client(obj: dict, store: SessionStore) -> WorklogClient:
    return WorklogClient(store, base_url=obj.get("api_url"), timeout=obj.get("timeout"))


def _fail(e: WorklogError):
    if isinstance(e, ValidationError):
        raise click.ClickException("\n".join(f"{field}: {msg}" for field, msg in e.errors.items()))
    if isinstance(e, SessionExpired):
        raise click.ClickException(f"{e.message} Run `worklog login`.")
    raise click.ClickException(e.message)


def async_command(func):
    """Run an async click callback with a client bound to the stored session."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        ctx = click.get_current_context()
        store = FileSessionStore()

        async def run():
            async with _make_client(ctx.obj, store) as client:
                return await func(client, store, *args, **kwargs)

        try:
            return asyncio.run(run())
        except WorklogError as e:
            _fail(e)

    return wrapper


def _check(controller) -> None:
    if controller.needs_login:
        raise click.ClickException(f"{controller.error} Run `worklog login`.")
    if controller.error:
        raise click.ClickException(f"{controller.error} (run the command again to retry)")


async def _locate(controller: WorklogListController, record_id: int, start_page: int) -> WorklogRecord:
    """Load pages until the one holding ``record_id`` is current.

    Starts at ``start_page``, then walks every other page. Each page is
    fetched by the number asked for, whatever page the server reports back.
    """
    await controller.load(start_page)
    _check(controller)
    pages = [start_page] + [p for p in range(1, controller.total_pages + 1) if p != start_page]
    for index, page_number in enumerate(pages):
        if index > 0:
            await controller.load(page_number)
            _check(controller)
        for record in controller.items:
            if record.id == record_id:
                return record
    raise click.ClickException(f"Worklog {record_id} not found")


@click.group()
@click.option("--api-url", envvar="WORKLOG_API_URL", default=None, help="Base URL of the worklog API.")
@click.option("--timeout", type=float, default=None, help="Request timeout in seconds.")
@click.option("-v", "--verbose", is_flag=True, help="Log requests to stderr.")
@click.pass_context
def main(ctx, api_url: str | None, timeout: float | None, verbose: bool):
    """Track your work from the terminal."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["api_url"] = api_url
    ctx.obj["timeout"] = timeout


@main.command()
def welcome():
    """Show what you can do."""
    session = FileSessionStore().get()
    click.echo("Welcome to Worklog.")
    if session:
        click.echo(f"Logged in as {session.email}. Try `worklog list` or `worklog add`.")
    else:
        click.echo("Run `worklog signup` to create an account or `worklog login` to sign in.")


@main.command()
@click.option("--first-name", prompt=True)
@click.option("--last-name", prompt=True)
@click.option("--email", prompt=True)
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
@click.option("--image", type=click.Path(exists=True, dir_okay=False), default=None, help="Profile picture (JPEG).")
@async_command
async def signup(client, store, first_name: str, last_name: str, email: str, password: str, image: str | None):
    """Create an account."""
    await client.register(first_name, last_name, email, password, profile_image=image)
    click.echo("Signup Successful! Now run `worklog login`.")


@main.command()
@click.option("--email", prompt=True)
@click.option("--password", prompt=True, hide_input=True)
@async_command
async def login(client, store, email: str, password: str):
    """Log in and remember the session."""
    session = await client.login(email, password)
    click.echo(f"Logged in as {session.email}")


@main.command()
@async_command
async def logout(client, store):
    """Forget the stored session."""
    client.logout()
    click.echo("Logged out")


@main.command()
@async_command
async def profile(client, store):
    """Show your profile."""
    controller = ProfileController(client, store)
    await controller.activate()
    _check(controller)
    click.echo(profile_to_text(controller.profile))


@main.command("list")
@click.option("--page", default=1, type=click.IntRange(min=1), help="Page to show.")
@click.option("--limit", default=None, type=click.IntRange(min=1), help="Worklogs per page.")
@async_command
async def list_worklogs(client, store, page: int, limit: int | None):
    """List your worklogs, one page at a time."""
    controller = WorklogListController(client, store, page_size=limit)
    await controller.load(page)
    _check(controller)
    click.echo(page_to_table(controller.page))


@main.command()
@click.option("--title", prompt=True)
@click.option("--description", prompt=True, default="")
@async_command
async def add(client, store, title: str, description: str):
    """Add a worklog."""
    record = await client.create_record(store.get(), title, description)
    click.echo(f"Worklog added successfully (id {record.id})")


@main.command()
@click.argument("record_id", type=int)
@click.option("--page", default=1, type=click.IntRange(min=1), help="Page to start looking on.")
@async_command
async def view(client, store, record_id: int, page: int):
    """Show one worklog in full."""
    controller = WorklogListController(client, store)
    record = await _locate(controller, record_id, page)
    controller.select(record, ActionKind.VIEW)
    click.echo(record_to_text(controller.open_view()))


@main.command()
@click.argument("record_id", type=int)
@click.option("--title", default=None, help="New title (prompted with the current one).")
@click.option("--description", default=None, help="New description.")
@click.option("--page", default=1, type=click.IntRange(min=1), help="Page to start looking on.")
@async_command
async def edit(client, store, record_id: int, title: str | None, description: str | None, page: int):
    """Change a worklog's title or description."""
    controller = WorklogListController(client, store)
    record = await _locate(controller, record_id, page)
    controller.select(record, ActionKind.EDIT)
    target = controller.begin_edit()

    if title is None:
        title = click.prompt("Title", default=target.title)
    if description is None:
        description = click.prompt("Description", default=target.description, show_default=False)

    await client.update_record(store.get(), target.id, title, description)
    click.echo("Worklog updated successfully")


@main.command()
@click.argument("record_id", type=int)
@click.option("--page", default=1, type=click.IntRange(min=1), help="Page to start looking on.")
@click.option("--yes", is_flag=True, help="Don't ask for confirmation.")
@async_command
async def delete(client, store, record_id: int, page: int, yes: bool):
    """Delete a worklog and show the page you end up on."""
    controller = WorklogListController(client, store)
    record = await _locate(controller, record_id, page)
    controller.select(record, ActionKind.DELETE)

    if not yes and not click.confirm(f"Delete \"{record.title}\"?"):
        controller.cancel()
        click.echo("Cancelled")
        return

    if not await controller.confirm_delete():
        _check(controller)
    click.echo("Worklog deleted successfully")
    _check(controller)
    click.echo(page_to_table(controller.page))
