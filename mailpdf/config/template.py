"""Default configuration template.

Written to ~/.config/mailpdf/config.toml by `mailpdf config init`.
"""

CONFIG_TEMPLATE = """\
# mailpdf configuration

[defaults]
query = "in:inbox"
limit = 10
# Leave empty to send to yourself
send_to = ""
save_to = "Gmail PDFs"

[render]
include_header = true
include_attachments = true
embed_attachments = true
embed_remote_images = true
embed_inline_images = true
embed_avatar = true
width = 700

# Get client_id and client_secret from Google Cloud Console OAuth credentials
# (application type "Desktop app"), with the Gmail and Drive APIs enabled.
# For client_secret, use the MAILPDF_GMAIL_CLIENT_SECRET environment variable.
#
# [account]
# client_id = "xxxxxx.apps.googleusercontent.com"
#
# Then authenticate with:
#   mailpdf config auth
"""
