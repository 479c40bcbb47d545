"""Authentication with Google.

Usage:
    from mailpdf.auth import authenticate

    # Perform OAuth flow (interactive)
    result = authenticate(account_config)
"""

from mailpdf.config.schema import AccountConfig

from .gmail import CLIENT_SECRET_ENV, authenticate_loopback_flow, get_client_secret

__all__ = ["authenticate"]


def authenticate(account: AccountConfig) -> dict:
    """Authenticate the configured Google account.

    Opens the browser automatically and captures the authorization
    code via a local HTTP server.

    Args:
        account: The [account] section of config.toml.

    Returns:
        Authentication result dict:
        - On success: contains 'access_token'
        - On failure: contains 'error' and 'error_description'
    """
    client_id = account.get("client_id")
    if not client_id:
        return {
            "error": "missing_config",
            "error_description": "Account must have 'client_id' configured.",
        }

    client_secret = get_client_secret(account)
    if not client_secret:
        return {
            "error": "missing_config",
            "error_description": (
                f"Client secret not found. Set the {CLIENT_SECRET_ENV} environment "
                "variable or add 'client_secret' to config."
            ),
        }

    return authenticate_loopback_flow(client_id, client_secret)
