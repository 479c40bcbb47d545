"""`mailpdf config`: create, inspect and edit config.toml, and sign in."""

import typer
from typing_extensions import Annotated

from mailpdf.auth import authenticate
from mailpdf.config import (
    CONFIG_FILE,
    get_account,
    init_config,
    load_config,
    set_config_value,
)

app = typer.Typer(help="Manage configuration and Google sign-in")

SECRET_KEYS = {"client_secret"}


@app.command()
def init(
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Replace an existing config.toml")
    ] = False,
):
    """Write a commented config.toml template."""
    if not init_config(overwrite=force):
        typer.echo(f"{CONFIG_FILE} already exists (use --force to replace it)")
        return

    typer.echo(f"Wrote {CONFIG_FILE}")
    typer.echo()
    typer.echo("Next steps:")
    typer.echo("  1. Enable the Gmail and Drive APIs in Google Cloud Console")
    typer.echo("  2. Add your OAuth client_id under [account]")
    typer.echo("  3. Run 'mailpdf config auth'")


@app.command()
def auth():
    """Sign in to Google in the browser and cache the token.

    One token grants the Gmail and Drive access that save, send and
    export need.
    """
    account = get_account(load_config())
    if not account:
        typer.echo("No account configured.", err=True)
        typer.echo(f"Add an [account] section with a client_id to {CONFIG_FILE}")
        raise typer.Exit(1)

    typer.echo("Opening browser for Google sign-in...")
    result = authenticate(account)

    if "access_token" not in result:
        reason = result.get("error_description") or result.get("error", "unknown error")
        typer.echo(f"Authentication failed: {reason}", err=True)
        raise typer.Exit(1)

    typer.echo("Authentication successful!")


@app.command()
def show():
    """Print the current configuration, with secrets redacted."""
    config = load_config()

    if not config:
        typer.echo("No configuration found.")
        typer.echo("Run 'mailpdf config init' to create one.")
        return

    typer.echo(f"# {CONFIG_FILE}")
    for section, values in config.items():
        if not isinstance(values, dict):
            typer.echo(f"{section} = {values}")
            continue
        typer.echo(f"[{section}]")
        for key, value in values.items():
            if key in SECRET_KEYS:
                value = "***REDACTED***" if value else "(not set)"
            typer.echo(f"  {key} = {value}")


@app.command("set")
def set_value(
    key: Annotated[
        str, typer.Argument(help="section.field, e.g. 'defaults.limit'")
    ],
    value: Annotated[str, typer.Argument(help="New value")],
):
    """Set one config value.

    Examples:
        mailpdf config set defaults.save_to Receipts
        mailpdf config set render.embed_avatar false
    """
    try:
        set_config_value(key, value)
    except ValueError as e:
        typer.echo(f"Invalid value: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"{key} = {value}")
