"""Locations of mailpdf's config and token files.

Everything lives under $XDG_CONFIG_HOME/mailpdf (~/.config/mailpdf when
the variable is unset):
- config.toml: defaults, render options and the Google account
- credentials/token.json: cached OAuth token, owner-only permissions
"""

import os
from pathlib import Path


def config_home() -> Path:
    """Base directory for per-user configuration."""
    xdg = os.environ.get("XDG_CONFIG_HOME")
    return Path(xdg) if xdg else Path.home() / ".config"


CONFIG_DIR = config_home() / "mailpdf"
CONFIG_FILE = CONFIG_DIR / "config.toml"

CREDENTIALS_DIR = CONFIG_DIR / "credentials"
TOKEN_FILE = CREDENTIALS_DIR / "token.json"


def ensure_config_dir() -> Path:
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    return CONFIG_DIR


def ensure_credentials_dir() -> Path:
    """Create the credentials directory, readable by the owner only (700)."""
    CREDENTIALS_DIR.mkdir(parents=True, exist_ok=True)
    CREDENTIALS_DIR.chmod(0o700)
    return CREDENTIALS_DIR
