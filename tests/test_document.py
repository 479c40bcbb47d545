"""Tests for HTML/PDF document assembly."""

from unittest.mock import MagicMock

import pytest
from bs4 import BeautifulSoup

from mailpdf.errors import InvalidArgument
from mailpdf.read.models import Attachment, Blob, Thread
from mailpdf.render import RenderOptions, render_html, render_pdf
from mailpdf.render.document import PAGE_BREAK, avatar_url
from mailpdf.render.images import to_data_uri

from conftest import PNG_BYTES
from test_inline import TWO_IMAGES, build_raw


def _text(blob: Blob) -> str:
    return blob.data.decode("utf-8")


NO_AVATAR = RenderOptions(embed_avatar=False)


class TestRenderHtml:
    """Tests for render_html() on single messages."""

    def test_returns_html_blob(self, make_message, fetcher):
        blob = render_html(make_message(), NO_AVATAR, fetcher)

        assert blob.content_type == "text/html"
        assert blob.name == "Test message.html"
        assert "<p>Hello Bob</p>" in _text(blob)

    def test_header_block(self, make_message, fetcher):
        message = make_message(cc=["Carol <carol@example.com>"])

        html = _text(render_html(message, NO_AVATAR, fetcher))

        assert 'class="message-header"' in html
        assert 'Alice Smith <a href="mailto:alice@example.com">alice@example.com</a>' in html
        assert 'href="mailto:bob@example.com"' in html
        assert "<th>Cc:</th>" in html
        assert "<th>Bcc:</th>" not in html
        assert "Mon, Jan 15, 2024 at 10:00 AM" in html

    def test_header_can_be_disabled(self, make_message, fetcher):
        html = _text(render_html(make_message(), NO_AVATAR, fetcher, include_header=False))

        assert '<div class="message-header"' not in html
        assert "<th>From:</th>" not in html

    def test_subject_is_escaped(self, make_message, fetcher):
        html = _text(render_html(make_message(subject="<b>Hi</b>"), NO_AVATAR, fetcher))

        assert "&lt;b&gt;Hi&lt;/b&gt;" in html

    def test_filename_sanitized_from_subject(self, make_message, fetcher):
        blob = render_html(make_message(subject="Invoice: 2024/05?"), NO_AVATAR, fetcher)

        assert blob.name == "Invoice 202405.html"

    def test_filename_override(self, make_message, fetcher):
        blob = render_html(make_message(), NO_AVATAR, fetcher, filename="custom.html")

        assert blob.name == "custom.html"

    def test_empty_subject(self, make_message, fetcher):
        blob = render_html(make_message(subject=""), NO_AVATAR, fetcher)

        assert blob.name == "(no subject).html"

    def test_width_option(self, make_message, fetcher):
        html = _text(render_html(make_message(), NO_AVATAR, fetcher, width=520))

        assert "width: 520px" in html

    def test_full_document_body_is_unwrapped(self, make_message, fetcher):
        body = (
            "<html><head><title>x</title><style>p { color: red; }</style></head>"
            "<body bgcolor='#fff'><p>Inner</p></body></html>"
        )

        html = _text(render_html(make_message(body=body), NO_AVATAR, fetcher))

        assert html.count("<html") == 1
        assert "<style>p { color: red; }</style><p>Inner</p>" in html

    def test_body_tag_with_angle_bracket_in_attribute(self, make_message, fetcher):
        body = '<html><body title="a>b"><p>Inner</p></body></html>'

        html = _text(render_html(make_message(body=body), NO_AVATAR, fetcher))

        assert '<div class="message-body"><p>Inner</p></div>' in html
        assert "a&gt;b" not in html


class TestMultipleMessages:
    """Tests for concatenating messages and threads."""

    def test_page_break_between_messages(self, make_message, fetcher):
        messages = [make_message(id=f"m{i}", subject=f"Subject {i}") for i in range(3)]

        html = _text(render_html(messages, NO_AVATAR, fetcher))

        assert html.count(PAGE_BREAK) == 2
        body = html[html.index('<div class="document">'):]
        assert body.index(PAGE_BREAK) > body.index("Subject 0")
        positions = [body.index(f"Subject {i}") for i in range(3)]
        assert positions == sorted(positions)

    def test_thread_is_expanded(self, make_message, fetcher):
        thread = Thread(
            id="t1",
            messages=[make_message(subject="First"), make_message(subject="Re: First")],
        )

        blob = render_html(thread, NO_AVATAR, fetcher)

        assert _text(blob).count('class="message"') == 2
        assert blob.name == "Re First.html"

    def test_mixed_messages_and_threads(self, make_message, fetcher):
        thread = Thread(id="t1", messages=[make_message(), make_message()])

        html = _text(render_html([make_message(), thread], NO_AVATAR, fetcher))

        assert html.count('class="message"') == 3
        assert html.count(PAGE_BREAK) == 2


class TestInvalidInput:
    """render_html rejects anything that is not a Message or Thread."""

    def test_string(self, fetcher):
        with pytest.raises(InvalidArgument):
            render_html("not a message", fetcher=fetcher)

    def test_list_with_foreign_item(self, make_message, fetcher):
        with pytest.raises(InvalidArgument):
            render_html([make_message(), 42], fetcher=fetcher)

    def test_empty_list(self, fetcher):
        with pytest.raises(InvalidArgument):
            render_html([], fetcher=fetcher)

    def test_empty_thread(self, fetcher):
        with pytest.raises(InvalidArgument):
            render_html(Thread(id="t1"), fetcher=fetcher)

    def test_unknown_option(self, make_message, fetcher):
        with pytest.raises(InvalidArgument):
            render_html(make_message(), fetcher=fetcher, embed_everything=True)

    def test_options_of_wrong_type(self, make_message, fetcher):
        with pytest.raises(InvalidArgument):
            render_html(make_message(), {"width": 100}, fetcher)

    def test_invalid_argument_is_type_error(self, fetcher):
        with pytest.raises(TypeError):
            render_html(None, fetcher=fetcher)


class TestImages:
    """Tests for image embedding during assembly."""

    def test_remote_images_embedded(self, make_message, fetcher):
        urls = [f"https://cdn.example.com/{i}.png" for i in range(2)]
        for url in urls:
            fetcher.add_image(url, PNG_BYTES)
        body = "".join(f'<img src="{url}">' for url in urls)

        html = _text(render_html(make_message(body=body), NO_AVATAR, fetcher))

        srcs = [img["src"] for img in BeautifulSoup(html, "html.parser").find_all("img")]
        assert srcs == [to_data_uri("image/png", PNG_BYTES)] * 2

    def test_remote_images_left_alone_when_disabled(self, make_message, fetcher):
        body = '<img src="https://cdn.example.com/a.png">'
        options = NO_AVATAR.merge(embed_remote_images=False)

        html = _text(render_html(make_message(body=body), options, fetcher))

        assert body in html
        assert fetcher.calls == []

    def test_inline_images_embedded(self, make_message, fetcher):
        body = '<img src="cid:img1"><img src="cid:img2">'
        message = make_message(body=body, raw=build_raw(body, TWO_IMAGES))

        html = _text(render_html(message, NO_AVATAR, fetcher))

        assert "cid:" not in html
        assert to_data_uri("image/png", PNG_BYTES) in html

    def test_inline_images_left_alone_when_disabled(self, make_message, fetcher):
        body = '<img src="cid:img1">'
        message = make_message(body=body, raw=build_raw(body, TWO_IMAGES))

        html = _text(
            render_html(message, NO_AVATAR, fetcher, embed_inline_images=False)
        )

        assert body in html

    def test_avatar_embedded(self, make_message, fetcher):
        fetcher.add_image(avatar_url("alice@example.com"), PNG_BYTES, "image/jpeg")

        html = _text(render_html(make_message(), fetcher=fetcher))

        assert f'class="avatar" src="{to_data_uri("image/jpeg", PNG_BYTES)}"' in html

    def test_missing_avatar_is_omitted(self, make_message, fetcher):
        html = _text(render_html(make_message(), fetcher=fetcher))

        assert 'class="avatar"' not in html
        assert fetcher.calls == [avatar_url("alice@example.com")]

    def test_avatar_url_normalizes_address(self):
        assert avatar_url("Alice <Alice@Example.com>") == avatar_url("alice@example.com")
        assert avatar_url("undisclosed-recipients") is None


class TestAttachments:
    """Tests for the attachment list."""

    @pytest.fixture
    def message(self, make_message):
        return make_message(
            attachments=[
                Attachment(name="chart.png", content_type="image/png", data=PNG_BYTES),
                Attachment(name="report.pdf", content_type="application/pdf", data=b"x" * 2048),
            ]
        )

    def test_lists_attachments(self, message, fetcher):
        html = _text(render_html(message, NO_AVATAR, fetcher))

        assert "2 attachments" in html
        assert "chart.png" in html
        assert "report.pdf" in html
        assert "(2.0 KB)" in html

    def test_image_attachments_embedded(self, message, fetcher):
        html = _text(render_html(message, NO_AVATAR, fetcher))

        assert f'<img src="{to_data_uri("image/png", PNG_BYTES)}" alt="chart.png" />' in html

    def test_embedding_can_be_disabled(self, message, fetcher):
        html = _text(render_html(message, NO_AVATAR, fetcher, embed_attachments=False))

        assert "chart.png" in html
        assert to_data_uri("image/png", PNG_BYTES) not in html

    def test_list_can_be_disabled(self, message, fetcher):
        html = _text(render_html(message, NO_AVATAR, fetcher, include_attachments=False))

        assert "report.pdf" not in html


class TestRenderPdf:
    """Tests for render_pdf()."""

    def test_converts_assembled_html(self, make_message, fetcher):
        converter = MagicMock()
        converter.convert.return_value = b"%PDF-1.4 fake"

        blob = render_pdf(make_message(), converter, NO_AVATAR, fetcher)

        assert blob.content_type == "application/pdf"
        assert blob.name == "Test message.pdf"
        assert blob.data == b"%PDF-1.4 fake"
        html_blob = converter.convert.call_args.args[0]
        assert html_blob.content_type == "text/html"
        assert b"Hello Bob" in html_blob.data

    def test_filename_override(self, make_message, fetcher):
        converter = MagicMock()
        converter.convert.return_value = b"%PDF"

        blob = render_pdf(make_message(), converter, NO_AVATAR, fetcher, filename="out.pdf")

        assert blob.name == "out.pdf"
        assert converter.convert.call_args.args[0].name == "Test message.html"

    def test_invalid_input_never_reaches_converter(self, fetcher):
        converter = MagicMock()

        with pytest.raises(InvalidArgument):
            render_pdf([object()], converter, fetcher=fetcher)

        converter.convert.assert_not_called()
