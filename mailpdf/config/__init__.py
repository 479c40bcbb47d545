"""mailpdf configuration.

Settings live in config.toml (see mailpdf.config.paths) and are read once
per process. Three sections are recognised: [defaults] for the save and
send commands, [render] for RenderOptions overrides, and [account] for
the Google OAuth client.

Usage:
    from mailpdf.config import load_config, get_defaults, render_options_from_config

    config = load_config()
    options = render_options_from_config(config)
    query = get_defaults(config)["query"]
"""

import tomllib
from typing import get_type_hints

import tomli_w

from mailpdf.processing import DEFAULT_LIMIT, DEFAULT_QUERY
from mailpdf.render.options import RenderOptions

from .paths import CONFIG_FILE, ensure_config_dir
from .schema import AccountConfig, DefaultsConfig, MailPdfConfig, RenderConfig
from .template import CONFIG_TEMPLATE

__all__ = [
    "load_config",
    "save_config",
    "init_config",
    "get_account",
    "get_defaults",
    "render_options_from_config",
    "set_config_value",
    "CONFIG_FILE",
]

DEFAULT_FOLDER = "Gmail PDFs"

# Keys `config set` accepts, with the type each value is stored as
SETTABLE_KEYS: dict[str, dict[str, type]] = {
    "defaults": get_type_hints(DefaultsConfig),
    "render": get_type_hints(RenderConfig),
    "account": get_type_hints(AccountConfig),
}

TRUE_WORDS = ("true", "yes", "on", "1")
FALSE_WORDS = ("false", "no", "off", "0")

_cached_config: MailPdfConfig | None = None


def load_config(*, force_reload: bool = False) -> MailPdfConfig:
    """Read config.toml, or return {} if there is none.

    The result is cached; pass force_reload=True to read the file again.
    """
    global _cached_config

    if _cached_config is not None and not force_reload:
        return _cached_config

    if CONFIG_FILE.exists():
        with open(CONFIG_FILE, "rb") as f:
            _cached_config = tomllib.load(f)
    else:
        _cached_config = {}

    return _cached_config


def save_config(config: MailPdfConfig) -> None:
    global _cached_config

    ensure_config_dir()
    with open(CONFIG_FILE, "wb") as f:
        tomli_w.dump(config, f)
    _cached_config = config


def init_config(*, overwrite: bool = False) -> bool:
    """Write the commented template to config.toml.

    Returns:
        False if a config file already exists and overwrite is not set.
    """
    ensure_config_dir()

    if CONFIG_FILE.exists() and not overwrite:
        return False

    CONFIG_FILE.write_text(CONFIG_TEMPLATE)
    return True


def get_account(config: MailPdfConfig) -> AccountConfig | None:
    """The [account] section, or None if it is missing or empty."""
    return config.get("account") or None


def get_defaults(config: MailPdfConfig) -> DefaultsConfig:
    """The [defaults] section with built-in values filled in."""
    defaults = config.get("defaults", {})
    return {
        "query": defaults.get("query", DEFAULT_QUERY),
        "limit": defaults.get("limit", DEFAULT_LIMIT),
        "send_to": defaults.get("send_to", ""),
        "save_to": defaults.get("save_to", DEFAULT_FOLDER),
    }


def render_options_from_config(config: MailPdfConfig) -> RenderOptions:
    """Build RenderOptions from the [render] section.

    Raises:
        InvalidArgument: If the section names an unknown option.
    """
    return RenderOptions().merge(**config.get("render", {}))


def set_config_value(key: str, value: str) -> None:
    """Set one value, addressed as "section.field", and save the file.

    Examples:
        set_config_value("defaults.limit", "20")
        set_config_value("render.embed_avatar", "false")

    Raises:
        ValueError: If the key is not part of the config schema, or the
            value does not convert to the field's type.
    """
    section, _, field = key.partition(".")
    fields = SETTABLE_KEYS.get(section, {})
    if field not in fields:
        known = ", ".join(f"{s}.{f}" for s, fs in SETTABLE_KEYS.items() for f in fs)
        raise ValueError(f"Unknown key '{key}'. Known keys: {known}")

    config = load_config(force_reload=True)
    config.setdefault(section, {})[field] = _convert_value(value, fields[field])
    save_config(config)


def _convert_value(value: str, kind: type) -> str | int | bool:
    if kind is bool:
        lowered = value.strip().lower()
        if lowered in TRUE_WORDS:
            return True
        if lowered in FALSE_WORDS:
            return False
        raise ValueError(f"'{value}' is not a boolean")

    if kind is int:
        return int(value)

    return value
