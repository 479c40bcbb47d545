"""Options controlling how messages are rendered to documents."""

from dataclasses import dataclass, fields, replace

from mailpdf.errors import InvalidArgument


@dataclass(frozen=True)
class RenderOptions:
    """Document assembly settings.

    Attributes:
        include_header: Render a from/to/cc/bcc/subject/date block.
        include_attachments: Append a list of the message's attachments.
        embed_attachments: Show image attachments inline in that list.
        embed_remote_images: Download http(s) images and inline them.
        embed_inline_images: Resolve cid: images from the raw message.
        embed_avatar: Show the sender's avatar in the header block.
        width: Content width in pixels.
        filename: Output filename. Derived from the subject when None.
    """

    include_header: bool = True
    include_attachments: bool = True
    embed_attachments: bool = True
    embed_remote_images: bool = True
    embed_inline_images: bool = True
    embed_avatar: bool = True
    width: int = 700
    filename: str | None = None

    @classmethod
    def option_names(cls) -> set[str]:
        return {f.name for f in fields(cls)}

    def merge(self, **overrides) -> "RenderOptions":
        """Return a copy with the given options replaced.

        Raises:
            InvalidArgument: If an override names an unknown option.
        """
        unknown = set(overrides) - self.option_names()
        if unknown:
            raise InvalidArgument(
                f"Unknown render option(s): {', '.join(sorted(unknown))}"
            )
        return replace(self, **overrides)
