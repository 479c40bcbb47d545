"""Send command implementation.

Renders each unread message to PDF, emails it as an attachment, and
marks the message read once it has been sent.
"""

import typer
from typing_extensions import Annotated

from mailpdf.config import get_defaults, load_config, render_options_from_config
from mailpdf.drive import DriveClient
from mailpdf.errors import MailPdfError
from mailpdf.gmail import GmailClient, HttpError, get_credentials
from mailpdf.http import HttpFetcher
from mailpdf.processing import process_unread_messages
from mailpdf.read.models import Message
from mailpdf.render import render_pdf
from mailpdf.render.formatting import NO_SUBJECT
from mailpdf.render.pdf import DrivePdfConverter

app = typer.Typer(help="Email unread messages as PDF attachments")


@app.callback(invoke_without_command=True)
def send(
    query: Annotated[
        str | None, typer.Option("--query", "-q", help="Gmail search query")
    ] = None,
    limit: Annotated[
        int | None, typer.Option("--limit", "-n", help="Maximum threads to process")
    ] = None,
    to: Annotated[
        str | None, typer.Option("--to", help="Recipient (default: yourself)")
    ] = None,
):
    """Email unread messages as PDFs and mark them read."""
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
    converter = DrivePdfConverter(DriveClient(creds))
    fetcher = HttpFetcher()

    def send_message(message: Message) -> bool:
        pdf = render_pdf(message, converter, options, fetcher)
        gmail.send_email(
            recipient,
            subject=message.subject or NO_SUBJECT,
            body=f"Attached: {pdf.name}",
            attachments=[pdf],
        )
        typer.echo(f"Sent: {pdf.name}")
        return True

    try:
        recipient = to or defaults["send_to"] or gmail.get_user_email()
        count = process_unread_messages(
            gmail,
            send_message,
            query=query if query is not None else defaults["query"],
            limit=limit if limit is not None else defaults["limit"],
        )
    except (MailPdfError, HttpError) as e:
        typer.echo(f"Send failed: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"{count} messages sent to {recipient}")
