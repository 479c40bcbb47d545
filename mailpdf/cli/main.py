"""Main CLI entry point for mailpdf."""

import logging

import typer
from typing_extensions import Annotated

from mailpdf import __version__
from mailpdf.cli import commands

app = typer.Typer(
    name="mailpdf",
    help="Render Gmail messages to PDF and save or email them",
    no_args_is_help=True,
)

# Register command groups
app.add_typer(commands.save.app, name="save")
app.add_typer(commands.send.app, name="send")
app.add_typer(commands.config.app, name="config")

# export takes a positional ID, so it is a plain command rather than a group
app.command("export")(commands.export.export)


@app.callback()
def main_callback(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Show debug logging")
    ] = False,
):
    """Configure logging before any command runs."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command()
def version():
    """Show version information."""
    typer.echo(f"mailpdf version {__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
