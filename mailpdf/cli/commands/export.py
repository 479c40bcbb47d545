"""Export command implementation."""

from pathlib import Path

import typer
from typing_extensions import Annotated

from mailpdf.config import load_config, render_options_from_config
from mailpdf.drive import DriveClient
from mailpdf.errors import MailPdfError
from mailpdf.gmail import GmailClient, HttpError, get_credentials
from mailpdf.render import render_html, render_pdf
from mailpdf.render.pdf import DrivePdfConverter

VALID_FORMATS = ("pdf", "html")


def export(
    message_id: Annotated[str, typer.Argument(help="Message (or thread) ID")],
    thread: Annotated[
        bool, typer.Option("--thread", help="Treat the ID as a thread ID")
    ] = False,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Output file or directory"),
    ] = None,
    format: Annotated[
        str, typer.Option("--format", "-f", help="Output format: pdf, html")
    ] = "pdf",
):
    """Render one message or thread to a PDF or HTML file."""
    if format not in VALID_FORMATS:
        typer.echo(
            f"Invalid format '{format}'. Choose from: {', '.join(VALID_FORMATS)}",
            err=True,
        )
        raise typer.Exit(1)

    try:
        options = render_options_from_config(load_config())
    except MailPdfError as e:
        typer.echo(f"Invalid [render] configuration: {e}", err=True)
        raise typer.Exit(1)

    creds = get_credentials()
    if creds is None:
        typer.echo("Not authenticated. Run 'mailpdf config auth' first.", err=True)
        raise typer.Exit(1)

    gmail = GmailClient(creds)

    try:
        item = gmail.get_thread(message_id) if thread else gmail.get_message(message_id)
        if format == "html":
            blob = render_html(item, options)
        else:
            blob = render_pdf(item, DrivePdfConverter(DriveClient(creds)), options)
    except (MailPdfError, HttpError) as e:
        typer.echo(f"Export failed: {e}", err=True)
        raise typer.Exit(1)

    path = output or Path(blob.name)
    if path.is_dir():
        path = path / blob.name
    path.write_bytes(blob.data)

    typer.echo(f"Wrote {path}")
