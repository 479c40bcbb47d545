"""Configuration schema definitions.

Uses TypedDict for type safety without runtime overhead.
These types match the structure of config.toml.
"""

from typing import TypedDict


class DefaultsConfig(TypedDict, total=False):
    """Settings read by the save and send commands.

    Attributes:
        query: Gmail search query the commands start from.
        limit: Maximum number of threads to process per run.
        send_to: Recipient for `mailpdf send`. Empty means the active user.
        save_to: Drive folder name for `mailpdf save`.
    """

    query: str
    limit: int
    send_to: str
    save_to: str


class RenderConfig(TypedDict, total=False):
    """Overrides for RenderOptions. See mailpdf.render.options."""

    include_header: bool
    include_attachments: bool
    embed_attachments: bool
    embed_remote_images: bool
    embed_inline_images: bool
    embed_avatar: bool
    width: int


class AccountConfig(TypedDict, total=False):
    """Google account configuration.

    Attributes:
        client_id: Google Cloud OAuth client ID.
        client_secret: Optional client secret (prefer env var).
    """

    client_id: str
    client_secret: str


class MailPdfConfig(TypedDict, total=False):
    """Root configuration structure."""

    defaults: DefaultsConfig
    render: RenderConfig
    account: AccountConfig
