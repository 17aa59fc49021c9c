"""Config loading for the access key service.

Reads `.accesskeys/config.yaml` (or `~/.accesskeys/config.yaml`).
Raises SystemExit on parse errors, a missing `version` field, or an unknown
backend provider. If no config file is found, returns defaults (safe to run
without config).

Config search order:
  1. `config_path` argument (if provided - for testing or explicit override)
  2. ACCESSKEYS_CONFIG environment variable (if set)
  3. `.accesskeys/config.yaml` (working directory - for development)
  4. `~/.accesskeys/config.yaml` (home directory - for deployments)

Environment variable overrides (applied after the file):
  ACCESSKEYS_PORT            - api.port
  ACCESSKEYS_KEYS_DB_PATH    - store.path
  ACCESSKEYS_EVENTS_DB_PATH  - events.path

Example::

    version: 1
    store:
      provider: sqlite
      path: ~/.accesskeys/keys.db
    events:
      provider: sqlite
      path: ~/.accesskeys/events.db
    api:
      host: 127.0.0.1
      port: 3000
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from typing import Optional

import yaml

from accesskeys.constants import DEFAULT_EVENTS_DB_PATH, DEFAULT_KEYS_DB_PATH
from accesskeys.utils.logger import get_logger

logger = get_logger(__name__)

# ─── Version constants ────────────────────────────────────────────────────────

SUPPORTED_CONFIG_VERSION = 1

SUPPORTED_VERSIONS: frozenset[int] = frozenset({1})

# ─── Validation sets ─────────────────────────────────────────────────────────

VALID_STORE_PROVIDERS: frozenset[str] = frozenset({"sqlite", "memory"})
VALID_EVENT_PROVIDERS: frozenset[str] = frozenset({"sqlite", "memory", "null"})

DEFAULT_CONFIG_PATHS = [
    ".accesskeys/config.yaml",
    os.path.expanduser("~/.accesskeys/config.yaml"),
]


# ─── Dataclasses ─────────────────────────────────────────────────────────────


@dataclass
class StoreConfig:
    """Key store backend."""

    provider: str = "sqlite"  # "sqlite" | "memory"
    path: str = DEFAULT_KEYS_DB_PATH


@dataclass
class EventsConfig:
    """Audit event recorder backend."""

    provider: str = "sqlite"  # "sqlite" | "memory" | "null"
    path: str = DEFAULT_EVENTS_DB_PATH


@dataclass
class ApiConfig:
    """HTTP binding."""

    host: str = "127.0.0.1"
    port: int = 3000


@dataclass
class Config:
    """Root configuration object populated from config.yaml.

    All fields have safe defaults - the service can start without a file.
    """

    version: int = SUPPORTED_CONFIG_VERSION
    store: StoreConfig = field(default_factory=StoreConfig)
    events: EventsConfig = field(default_factory=EventsConfig)
    api: ApiConfig = field(default_factory=ApiConfig)
    path: Optional[str] = None  # Path of the loaded config file, if any

    @classmethod
    def defaults(cls) -> "Config":
        return cls()

    @classmethod
    def from_dict(cls, raw: dict, path: Optional[str] = None) -> "Config":
        """Construct Config from a parsed YAML dict.

        Merges user-supplied values onto defaults; unknown keys are ignored.

        Raises:
            SystemExit(1): On an unknown store or events provider.
        """
        store_raw = raw.get("store") or {}
        store = StoreConfig(
            provider=store_raw.get("provider", "sqlite"),
            path=store_raw.get("path", DEFAULT_KEYS_DB_PATH),
        )
        _check_choice("store.provider", store.provider, VALID_STORE_PROVIDERS)

        events_raw = raw.get("events") or {}
        events_provider = events_raw.get("provider", "sqlite")
        # YAML parses a bare `null` as None
        if events_provider is None:
            events_provider = "null"
        events = EventsConfig(
            provider=events_provider,
            path=events_raw.get("path", DEFAULT_EVENTS_DB_PATH),
        )
        _check_choice("events.provider", events.provider, VALID_EVENT_PROVIDERS)

        api_raw = raw.get("api") or {}
        api = ApiConfig(
            host=api_raw.get("host", "127.0.0.1"),
            port=api_raw.get("port", 3000),
        )

        return cls(
            version=raw.get("version", SUPPORTED_CONFIG_VERSION),
            store=store,
            events=events,
            api=api,
            path=path,
        )


def _check_choice(name: str, value: str, allowed: frozenset[str]) -> None:
    if value not in allowed:
        _fail(
            f"CONFIG ERROR: Invalid {name}: '{value}'. "
            f"Supported values: {sorted(allowed)}."
        )


def _fail(msg: str) -> None:
    print(msg, file=sys.stderr)
    raise SystemExit(1)


# ─── Config loading ───────────────────────────────────────────────────────────


def load_config(config_path: Optional[str] = None) -> Config:
    """Load and validate configuration.

    If no file is found on the search path, returns default Config (not an
    error). If a file is found but invalid, writes the error to stderr and
    raises SystemExit(1). Environment overrides are applied in both cases.

    Raises:
        SystemExit(1): On YAML parse error, missing or unsupported ``version``,
                       unknown provider, or invalid ``ACCESSKEYS_PORT``.
    """
    search_paths: list[str] = []
    if config_path:
        search_paths.append(config_path)
    env_config = os.environ.get("ACCESSKEYS_CONFIG")
    if env_config:
        search_paths.append(env_config)
    search_paths.extend(DEFAULT_CONFIG_PATHS)

    found_path: Optional[str] = None
    for candidate in search_paths:
        expanded = os.path.expanduser(candidate)
        if os.path.isfile(expanded):
            found_path = expanded
            break

    if found_path is None:
        logger.info("No config file found - using defaults", searched=search_paths)
        config = Config.defaults()
        _apply_env_overrides(config)
        return config

    logger.info("Loading config", path=found_path)

    try:
        with open(found_path) as fh:
            raw = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        _fail(
            f"CONFIG ERROR: Failed to parse {found_path}: {exc}\n"
            "Refusing to start with an invalid config. "
            "Check the YAML syntax and try again."
        )
    except OSError as exc:
        _fail(f"CONFIG ERROR: Could not read {found_path}: {exc}")

    if not isinstance(raw, dict):
        if raw is None:
            _fail(
                f"CONFIG ERROR: {found_path} is missing the required 'version' field.\n"
                "Add 'version: 1' to the top of your config file."
            )
        _fail(
            f"CONFIG ERROR: {found_path} is not a valid YAML mapping.\n"
            "The config file must be a YAML dictionary at the top level."
        )

    version = raw.get("version")
    if version is None:
        _fail(
            f"CONFIG ERROR: {found_path} is missing the required 'version' field.\n"
            "Add 'version: 1' to the top of your config file."
        )
    if version not in SUPPORTED_VERSIONS:
        _fail(
            f"CONFIG ERROR: Unsupported config version: {version}. "
            f"Supported versions: {sorted(SUPPORTED_VERSIONS)}."
        )

    config = Config.from_dict(raw, path=found_path)
    _apply_env_overrides(config)

    if config.api.host == "0.0.0.0":
        logger.warning(
            "SECURITY WARNING: the key service binds on 0.0.0.0 (all interfaces). "
            "Stored credentials become reachable by any network client that "
            "passes the upstream authorization layer."
        )
    if config.events.provider == "null":
        logger.warning("events.provider is 'null' - key mutations will not be audited")

    logger.info(
        "Config loaded",
        path=found_path,
        version=config.version,
        store_provider=config.store.provider,
        events_provider=config.events.provider,
    )
    return config


def _apply_env_overrides(config: Config) -> None:
    """Apply environment variable overrides to ``config`` in place.

    Raises:
        SystemExit(1): If ACCESSKEYS_PORT is set but not a valid integer.
    """
    env_port = os.environ.get("ACCESSKEYS_PORT")
    if env_port is not None:
        try:
            config.api.port = int(env_port)
        except ValueError:
            _fail(
                "CONFIG ERROR: ACCESSKEYS_PORT environment variable is not a valid "
                f"integer: '{env_port}'"
            )

    keys_path = os.environ.get("ACCESSKEYS_KEYS_DB_PATH")
    if keys_path:
        config.store.path = keys_path

    events_path = os.environ.get("ACCESSKEYS_EVENTS_DB_PATH")
    if events_path:
        config.events.path = events_path
