"""Save command implementation.

Renders each starred message to PDF, saves it to a Drive folder, and
unstars the message once it has been saved.
"""

import typer
from typing_extensions import Annotated

from mailpdf.config import get_defaults, load_config, render_options_from_config
from mailpdf.drive import DriveClient
from mailpdf.errors import MailPdfError
from mailpdf.gmail import GmailClient, HttpError, get_credentials
from mailpdf.http import HttpFetcher
from mailpdf.processing import process_starred_messages
from mailpdf.read.models import Message
from mailpdf.render import render_html, render_pdf
from mailpdf.render.pdf import DrivePdfConverter

app = typer.Typer(help="Save starred messages as PDFs to Google Drive")


@app.callback(invoke_without_command=True)
def save(
    query: Annotated[
        str | None, typer.Option("--query", "-q", help="Gmail search query")
    ] = None,
    limit: Annotated[
        int | None, typer.Option("--limit", "-n", help="Maximum threads to process")
    ] = None,
    folder: Annotated[
        str | None, typer.Option("--folder", help="Drive folder name")
    ] = None,
    html: Annotated[
        bool, typer.Option("--html", help="Save HTML instead of PDF")
    ] = False,
):
    """Save starred messages to Drive and unstar them."""
    config = load_config()
    defaults = get_defaults(config)

    try:
        options = render_options_from_config(config)
    except MailPdfError as e:
        typer.echo(f"Invalid [render] configuration: {e}", err=True)
        raise typer.Exit(1)

    creds = get_credentials()
    if creds is None:
        typer.echo("Not authenticated. Run 'mailpdf config auth' first.", err=True)
        raise typer.Exit(1)

    gmail = GmailClient(creds)
    drive = DriveClient(creds)
    converter = DrivePdfConverter(drive)
    fetcher = HttpFetcher()

    def save_message(message: Message) -> bool:
        if html:
            blob = render_html(message, options, fetcher)
        else:
            blob = render_pdf(message, converter, options, fetcher)
        drive.create_file(target["id"], blob)
        typer.echo(f"Saved: {blob.name}")
        return True

    try:
        target = drive.get_or_create_folder(folder or defaults["save_to"])
        count = process_starred_messages(
            gmail,
            save_message,
            query=query if query is not None else defaults["query"],
            limit=limit if limit is not None else defaults["limit"],
        )
    except (MailPdfError, HttpError) as e:
        typer.echo(f"Save failed: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"{count} messages saved to '{target['name']}'")
