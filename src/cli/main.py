"""Main CLI entry point for the confluence-rest command.

This module provides the Typer application that exposes every client
operation as a subcommand. Credentials are read from CONFLUENCE_* environment
variables (or a .env file) and results are printed as JSON.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

import typer

from src.cli.errors import CLIError, ContentSourceError
from src.cli.models import CLISettings, ExitCode
from src.cli.output import OutputHandler
from src.confluence_rest.client import ConfluenceClient
from src.confluence_rest.errors import (
    APIUnreachableError,
    ConfigurationError,
    ContentNotFoundError,
    DomainError,
    InvalidCredentialsError,
    VersionConflictError,
)
from src.confluence_rest.response_handler import OperationResult

app = typer.Typer(
    name="confluence-rest",
    help="""Command-line access to the Confluence REST API.

Credentials are read from CONFLUENCE_URL, CONFLUENCE_USER and
CONFLUENCE_API_TOKEN (environment or .env file).

EXAMPLE:
  confluence-rest space TEAM
  confluence-rest create TEAM "Release notes" --body "<p>Hello</p>"
  confluence-rest search "cql=space=TEAM and type=page&limit=10" """,
    add_completion=False,
    rich_markup_mode=None,
    no_args_is_help=True,
)

logger = logging.getLogger(__name__)


def _configure_logging(verbosity: int, logdir: Optional[str] = None) -> None:
    """Configure logging based on verbosity level.

    Configures only the 'src' namespace logger to avoid affecting third-party
    libraries. The root logger is left unchanged.

    Args:
        verbosity: Verbosity level (0=WARNING, 1=INFO, 2=DEBUG)
        logdir: Optional directory for log files (creates timestamped log file)
    """
    if verbosity == 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    app_logger = logging.getLogger("src")
    app_logger.setLevel(level)

    date_format = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter("%(asctime)s [%(levelname)8s] %(message)s", datefmt=date_format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    app_logger.addHandler(console_handler)

    if logdir:
        log_path = Path(logdir)
        log_path.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_path / f"confluence-rest_{timestamp}.log"

        file_formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt=date_format
        )
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(file_formatter)
        app_logger.addHandler(file_handler)

        logger.info(f"Logging to file: {log_file}")


def _exit_code_for(error: BaseException) -> ExitCode:
    """Map an operation error to a process exit code."""
    if isinstance(error, (InvalidCredentialsError, ConfigurationError)):
        return ExitCode.AUTH_ERROR
    if isinstance(error, APIUnreachableError):
        return ExitCode.NETWORK_ERROR
    if isinstance(error, VersionConflictError):
        return ExitCode.CONFLICT
    if isinstance(error, (ContentNotFoundError, DomainError)):
        return ExitCode.NOT_FOUND
    return ExitCode.GENERAL_ERROR


def _read_content(body: Optional[str], file: Optional[str]) -> str:
    """Take page content from --body or --file, exactly one of them."""
    if body is not None and file is not None:
        raise ContentSourceError("Use either --body or --file, not both")
    if body is not None:
        return body
    if file is None:
        raise ContentSourceError("Page content is required (--body or --file)")
    try:
        return Path(file).read_text(encoding="utf-8")
    except OSError as e:
        raise ContentSourceError(f"Cannot read content file: {e.strerror}", file_path=file) from e


def _execute(
    ctx: typer.Context,
    description: str,
    operation: Callable[[ConfluenceClient], OperationResult],
) -> None:
    """Run one client operation and exit with a matching code.

    Args:
        ctx: Typer context carrying CLISettings
        description: Spinner text
        operation: Function issuing the request on the client and returning
            its future's OperationResult
    """
    settings: CLISettings = ctx.obj or CLISettings()
    output = OutputHandler(verbosity=settings.verbosity, no_color=settings.no_color)

    try:
        client = ConfluenceClient.from_env(settings.env_file)
    except (InvalidCredentialsError, ConfigurationError) as e:
        logger.error(f"Configuration failed: {e}")
        output.error(f"Configuration failed: {e}")
        output.info("Set CONFLUENCE_URL, CONFLUENCE_USER and CONFLUENCE_API_TOKEN")
        raise typer.Exit(ExitCode.AUTH_ERROR)

    try:
        with client:
            with output.spinner(description):
                result = operation(client)
    except CLIError as e:
        output.error(str(e))
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    if not result.ok:
        output.error(str(result.error))
        raise typer.Exit(_exit_code_for(result.error))

    output.print_result(result.value)
    raise typer.Exit(ExitCode.SUCCESS)


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbosity: int = typer.Option(
        0,
        "--verbosity",
        "-v",
        help="Verbosity level: 0=summary, 1=info, 2=debug",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
    env_file: Optional[str] = typer.Option(
        None,
        "--env-file",
        help="Load CONFLUENCE_* variables from this file instead of .env",
        metavar="PATH",
    ),
    logdir: Optional[str] = typer.Option(
        None,
        "--logdir",
        help="Directory for log files (creates timestamped log file)",
    ),
) -> None:
    """Command-line access to the Confluence REST API."""
    _configure_logging(verbosity, logdir)
    ctx.obj = CLISettings(verbosity=verbosity, no_color=no_color, env_file=env_file)


@app.command("space")
def space_command(ctx: typer.Context, space_key: str = typer.Argument(..., help="Space key")) -> None:
    """Show space information."""
    _execute(ctx, "Fetching space...", lambda c: c.get_space(space_key).result())


@app.command("home-page")
def home_page_command(ctx: typer.Context, space_key: str = typer.Argument(..., help="Space key")) -> None:
    """Show the home page of a space."""
    _execute(ctx, "Fetching home page...", lambda c: c.get_space_home_page(space_key).result())


@app.command("get")
def get_command(
    ctx: typer.Context,
    content_id: str = typer.Argument(..., help="Page ID"),
    expand: Optional[List[str]] = typer.Option(
        None,
        "--expand",
        "-e",
        help="Property to expand (can be used multiple times)",
    ),
) -> None:
    """Show a page by ID."""
    if expand:
        _execute(ctx, "Fetching page...", lambda c: c.get_custom_content_by_id(content_id, expand).result())
    else:
        _execute(ctx, "Fetching page...", lambda c: c.get_content_by_id(content_id).result())


@app.command("get-by-title")
def get_by_title_command(
    ctx: typer.Context,
    space_key: str = typer.Argument(..., help="Space key"),
    title: str = typer.Argument(..., help="Page title"),
) -> None:
    """Show a page by space and title."""
    _execute(ctx, "Fetching page...", lambda c: c.get_content_by_page_title(space_key, title).result())


@app.command("create")
def create_command(
    ctx: typer.Context,
    space_key: str = typer.Argument(..., help="Space key"),
    title: str = typer.Argument(..., help="Page title"),
    body: Optional[str] = typer.Option(None, "--body", help="Page content markup"),
    file: Optional[str] = typer.Option(None, "--file", help="Read page content from file"),
    parent_id: Optional[str] = typer.Option(
        None,
        "--parent",
        help="Parent page ID (default: the space's home page)",
    ),
    representation: str = typer.Option("storage", "--representation", help="Body representation"),
) -> None:
    """Create a page."""
    def operation(client: ConfluenceClient) -> OperationResult:
        content = _read_content(body, file)
        return client.post_content(space_key, title, content, parent_id, representation).result()

    _execute(ctx, "Creating page...", operation)


@app.command("update")
def update_command(
    ctx: typer.Context,
    space_key: str = typer.Argument(..., help="Space key"),
    content_id: str = typer.Argument(..., help="Page ID"),
    version: int = typer.Argument(..., help="New version number (current version + 1)"),
    title: str = typer.Argument(..., help="Page title"),
    body: Optional[str] = typer.Option(None, "--body", help="Page content markup"),
    file: Optional[str] = typer.Option(None, "--file", help="Read page content from file"),
    minor_edit: bool = typer.Option(False, "--minor-edit", help="Mark the edit as minor"),
    representation: str = typer.Option("storage", "--representation", help="Body representation"),
) -> None:
    """Update a page."""
    def operation(client: ConfluenceClient) -> OperationResult:
        content = _read_content(body, file)
        return client.put_content(
            space_key, content_id, version, title, content, minor_edit, representation
        ).result()

    _execute(ctx, "Updating page...", operation)


@app.command("delete")
def delete_command(ctx: typer.Context, content_id: str = typer.Argument(..., help="Page ID")) -> None:
    """Delete a page."""
    _execute(ctx, "Deleting page...", lambda c: c.delete_content(content_id).result())


@app.command("attachments")
def attachments_command(
    ctx: typer.Context,
    space_key: str = typer.Argument(..., help="Space key"),
    content_id: str = typer.Argument(..., help="Page ID"),
) -> None:
    """List the attachments of a page."""
    _execute(ctx, "Fetching attachments...", lambda c: c.get_attachments(space_key, content_id).result())


@app.command("attach")
def attach_command(
    ctx: typer.Context,
    space_key: str = typer.Argument(..., help="Space key"),
    content_id: str = typer.Argument(..., help="Page ID"),
    file_path: str = typer.Argument(..., help="File to upload"),
) -> None:
    """Upload a file as a new attachment."""
    _execute(
        ctx,
        "Uploading attachment...",
        lambda c: c.create_attachment(space_key, content_id, file_path).result(),
    )


@app.command("update-attachment")
def update_attachment_command(
    ctx: typer.Context,
    space_key: str = typer.Argument(..., help="Space key"),
    content_id: str = typer.Argument(..., help="Page ID"),
    attachment_id: str = typer.Argument(..., help="Attachment ID"),
    file_path: str = typer.Argument(..., help="File with the new data"),
) -> None:
    """Upload new data for an existing attachment."""
    _execute(
        ctx,
        "Uploading attachment data...",
        lambda c: c.update_attachment_data(space_key, content_id, attachment_id, file_path).result(),
    )


@app.command("labels")
def labels_command(ctx: typer.Context, content_id: str = typer.Argument(..., help="Page ID")) -> None:
    """List the labels of a page."""
    _execute(ctx, "Fetching labels...", lambda c: c.get_labels(content_id).result())


@app.command("add-labels")
def add_labels_command(
    ctx: typer.Context,
    content_id: str = typer.Argument(..., help="Page ID"),
    labels: List[str] = typer.Argument(..., help="Label names (global prefix)"),
) -> None:
    """Add labels to a page."""
    _execute(ctx, "Adding labels...", lambda c: c.post_labels(content_id, labels).result())


@app.command("delete-label")
def delete_label_command(
    ctx: typer.Context,
    content_id: str = typer.Argument(..., help="Page ID"),
    label_name: str = typer.Argument(..., help="Label name"),
) -> None:
    """Remove a label from a page."""
    _execute(ctx, "Removing label...", lambda c: c.delete_label(content_id, label_name).result())


@app.command("search")
def search_command(
    ctx: typer.Context,
    query: str = typer.Argument(..., help='Raw query string, e.g. "cql=type=page&limit=10"'),
) -> None:
    """Search content."""
    _execute(ctx, "Searching...", lambda c: c.search(query).result())


def main() -> None:
    """Main entry point for the CLI application."""
    app()


# Allow running as: python -m src.cli.main
if __name__ == "__main__":
    main()
