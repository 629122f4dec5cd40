"""Configuration loading: one JSON/YAML file holding IRC settings and DB options."""

import logging
import re
from dataclasses import dataclass, field
from typing import Mapping

import yaml

from irc_logger.errors import ConfigError

logger = logging.getLogger(__name__)

REQUIRED_DB_KEYS = ("db_host", "db_port", "db_name", "db_user", "db_pass")

_PORT_RE = re.compile(r"\+?[0-9]+")


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes")


def _parse_port(value, key: str) -> int:
    """Parse an unsigned 16-bit port number or raise ConfigError(invalid)."""
    text = str(value)
    if not _PORT_RE.fullmatch(text):
        raise ConfigError.invalid(key)
    port = int(text)
    if port > 0xFFFF:
        raise ConfigError.invalid(key)
    return port


@dataclass(frozen=True)
class ConnectionConfig:
    host: str
    port: int
    name: str
    user: str
    password: str
    debug: bool = False

    @property
    def wants_auth(self) -> bool:
        return self.user != "" and self.password != ""


@dataclass(frozen=True)
class IrcConfig:
    server: str
    nickname: str
    port: int = 6667
    username: str = ""
    realname: str = ""
    password: str = ""
    use_ssl: bool = False
    channels: tuple[str, ...] = ()
    channel_keys: dict[str, str] = field(default_factory=dict)
    nick_password: str = ""


def resolve_connection_config(options: Mapping) -> ConnectionConfig:
    """Build ConnectionConfig from the ``options`` map of the config file.

    The five ``db_*`` keys are mandatory and checked in a fixed order so the
    error always names the first one missing. ``debug`` is lenient: absent
    or unparseable means False.
    """
    values = {}
    for key in REQUIRED_DB_KEYS:
        if key not in options:
            raise ConfigError.missing(key)
        # null in the file reads as empty, so it never becomes a "None" credential
        value = options[key]
        values[key] = "" if value is None else str(value)

    port = _parse_port(values["db_port"], "db_port")
    debug = _parse_bool(str(options.get("debug", "false")))

    return ConnectionConfig(
        host=values["db_host"],
        port=port,
        name=values["db_name"],
        user=values["db_user"],
        password=values["db_pass"],
        debug=debug,
    )


def load_irc_config(data: Mapping) -> IrcConfig:
    """Build IrcConfig from the top level of the config file."""
    for key in ("server", "nickname"):
        if not data.get(key):
            raise ConfigError.missing(key)

    use_ssl = data.get("use_ssl", False)
    if not isinstance(use_ssl, bool):
        use_ssl = _parse_bool(str(use_ssl))

    if "port" in data:
        port = _parse_port(data["port"], "port")
    else:
        port = 6697 if use_ssl else 6667

    channels = data.get("channels") or []
    if isinstance(channels, str):
        channels = [channels]

    nickname = str(data["nickname"])
    return IrcConfig(
        server=str(data["server"]),
        nickname=nickname,
        port=port,
        username=str(data.get("username") or nickname),
        realname=str(data.get("realname") or nickname),
        password=str(data.get("password") or ""),
        use_ssl=use_ssl,
        channels=tuple(str(c) for c in channels),
        channel_keys={str(k): str(v) for k, v in (data.get("channel_keys") or {}).items()},
        nick_password=str(data.get("nick_password") or ""),
    )


def load_config_file(path: str) -> dict:
    """Read the config file. JSON is accepted as-is since it is valid YAML."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as exc:
        raise ConfigError(ConfigError.MISSING, path,
                          f"config file {path} was not found") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(ConfigError.INVALID, path,
                          f"config file {path} could not be parsed: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(ConfigError.INVALID, path,
                          f"config file {path} must contain a mapping")
    logger.info("Loaded config from %s", path)
    return data


def load_config(path: str) -> tuple[IrcConfig, ConnectionConfig]:
    """Load the file and resolve both halves of the configuration."""
    data = load_config_file(path)
    irc_config = load_irc_config(data)

    options = data.get("options")
    if not isinstance(options, dict):
        raise ConfigError(ConfigError.MISSING, "options", "DB config is not found")
    return irc_config, resolve_connection_config(options)
