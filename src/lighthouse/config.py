"""Application configuration.

``AppConfig`` is a frozen dataclass: immutable after creation and
IDE-autocompletable. ``load_config()`` builds one from the process
environment and the project's ``.env`` file, validating the required
keys and, in production, caching the parsed pairs as JSON.
"""

import hashlib
import json
import logging
import os
import tempfile
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import dotenv_values

from lighthouse.errors import ConfigurationError

logger = logging.getLogger("lighthouse.config")

REQUIRED_KEYS: tuple[str, ...] = (
    "APP_NAME",
    "APP_ENV",
    "APP_DEBUG",
    "APP_URL",
    "TIMEZONE",
    "LOG_FILE",
    "THEME",
    "DEFAULT_TITLE",
    "DEFAULT_DESC",
    "DEFAULT_CANONICAL",
    "DEFAULT_AUTHOR",
    "DEFAULT_KEYWORDS",
    "DEFAULT_CHARSET",
)

_TRUTHY = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(debug=True, secret_key="s3cr3t", database="sqlite:///app.db")
    """

    # Application
    app_name: str = "Lighthouse"
    app_env: str = "local"
    debug: bool = False
    app_url: str = "http://localhost:8000"
    app_version: str = "dev"
    timezone: str = "UTC"
    theme: str = "pico.blue.min.css"
    testing: bool = False

    # Default page metadata
    default_title: str = "Welcome to Lighthouse"
    default_description: str = "A minimal, predictable web micro-stack."
    default_canonical: str = "http://localhost:8000"
    default_author: str = "Max"
    default_keywords: str = "python, microstack, htmx, pico.css"
    default_charset: str = "utf-8"

    # Server
    host: str = "127.0.0.1"
    port: int = 8000

    # Security
    secret_key: str = ""
    session_cookie: str = "lighthouse_session"
    login_url: str = "/login"

    # Templates
    template_dir: str | Path = "templates"
    layout: str = "_layout.html"
    not_found_template: str = "404.html"

    # Storage
    database: str | None = None
    migrations_dir: str | Path | None = None
    rate_limit_file: str | Path = "storage/rate_limits.json"
    log_file: str | Path | None = None

    # Provenance of the loaded values
    cache_used: bool = False
    env: Mapping[str, str] = field(default_factory=dict, repr=False, compare=False)

    @property
    def meta(self) -> dict[str, str]:
        """Default page metadata, overridable per view."""
        return {
            "title": self.default_title,
            "description": self.default_description,
            "author": self.default_author,
            "keywords": self.default_keywords,
            "charset": self.default_charset,
            "canonical": self.default_canonical,
        }

    def get(self, key: str, default: str | None = None) -> str | None:
        """Look up a raw environment value by key (``config.get("APP_NAME")``)."""
        return self.env.get(key, default)


# -- Parsing helpers --


def env_or(
    name: str, default: str | None = None, environ: Mapping[str, str] | None = None
) -> str | None:
    """Return an environment value, or *default* when unset or empty."""
    source = os.environ if environ is None else environ
    value = source.get(name)
    if value is None or value == "":
        return default
    return value


def bool_from_env(value: object) -> bool:
    """Interpret ``1/true/yes/on`` (any case) as true. Bools pass through."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in _TRUTHY


def normalize_url(url: str | None) -> str:
    """Trim whitespace and trailing slashes from a base URL."""
    return (url or "").strip().rstrip("/")


def missing_keys(environ: Mapping[str, str]) -> list[str]:
    """Required keys that are absent or empty in *environ*."""
    return [key for key in REQUIRED_KEYS if not environ.get(key)]


def load_dotenv(
    path: str | Path, environ: MutableMapping[str, str] | None = None
) -> dict[str, str]:
    """Parse a ``.env`` file and export its values.

    Values already present in *environ* (``os.environ`` by default) win
    over the file. Returns every parsed pair; a missing file gives ``{}``.
    """
    path = Path(path)
    if not path.is_file():
        return {}
    parsed = {k: v for k, v in dotenv_values(path).items() if v is not None}
    _export(parsed, environ)
    return parsed


def _export(pairs: Mapping[str, str], environ: MutableMapping[str, str] | None) -> None:
    target = os.environ if environ is None else environ
    for key, value in pairs.items():
        target.setdefault(key, value)


def default_cache_path(root: Path) -> Path:
    """Per-project cache location in the system temp directory."""
    slug = hashlib.sha1(str(root.resolve()).encode()).hexdigest()[:12]
    return Path(tempfile.gettempdir()) / f"lighthouse_env_{slug}.json"


def _read_cache(cache_path: Path, env_file: Path) -> dict[str, str] | None:
    if not (cache_path.is_file() and env_file.is_file()):
        return None
    if cache_path.stat().st_mtime < env_file.stat().st_mtime:
        return None
    try:
        data = json.loads(cache_path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        logger.warning("Ignoring unreadable config cache %s", cache_path)
        return None
    if not isinstance(data, dict):
        return None
    return {str(k): str(v) for k, v in data.items()}


def _write_cache(cache_path: Path, pairs: Mapping[str, str]) -> None:
    try:
        cache_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=cache_path.parent, prefix=".lighthouse-env-")
    except OSError:
        logger.warning("Could not write config cache %s", cache_path)
        return
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(dict(pairs), fh)
        os.replace(tmp, cache_path)
    except OSError:
        Path(tmp).unlink(missing_ok=True)
        logger.warning("Could not write config cache %s", cache_path)


def _read_version(root: Path) -> str:
    version_file = root / "VERSION"
    if version_file.is_file():
        return version_file.read_text(encoding="utf-8").strip() or "dev"
    return "dev"


def load_config(
    root: str | Path = ".",
    *,
    environ: MutableMapping[str, str] | None = None,
    testing: bool = False,
    cache_path: str | Path | None = None,
    **overrides: object,
) -> AppConfig:
    """Build an ``AppConfig`` from the environment and ``<root>/.env``.

    In ``production`` a JSON cache of the parsed pairs is reused while it
    is at least as new as ``.env``. Missing required keys raise
    ``ConfigurationError`` unless *testing* is set, in which case they
    are logged and defaults fill in. Keyword *overrides* replace any
    computed field.
    """
    root = Path(root)
    env_file = root / ".env"
    source = os.environ if environ is None else environ
    app_env = env_or("APP_ENV", "local", source) or "local"
    cache = Path(cache_path) if cache_path else default_cache_path(root)

    cache_used = False
    pairs: dict[str, str] | None = None
    if app_env == "production":
        pairs = _read_cache(cache, env_file)
        if pairs is not None:
            _export(pairs, environ)
            cache_used = True
    if pairs is None:
        pairs = load_dotenv(env_file, environ)
        app_env = env_or("APP_ENV", "local", source) or "local"
        if app_env == "production" and pairs:
            _write_cache(cache, pairs)

    missing = missing_keys(source)
    if missing:
        msg = f"Missing required environment keys: {', '.join(missing)}"
        if not testing:
            raise ConfigurationError(msg)
        logger.error(msg)

    app_url = normalize_url(env_or("APP_URL", "http://localhost:8000", source))
    debug_raw = env_or("APP_DEBUG", None, source)
    values: dict[str, object] = {
        "app_name": env_or("APP_NAME", "Lighthouse", source),
        "app_env": app_env,
        "debug": bool_from_env(debug_raw) if debug_raw is not None else app_env == "local",
        "app_url": app_url,
        "app_version": _read_version(root),
        "timezone": env_or("TIMEZONE", "UTC", source),
        "theme": env_or("THEME", "pico.blue.min.css", source),
        "testing": testing,
        "default_title": env_or("DEFAULT_TITLE", "Welcome to Lighthouse", source),
        "default_description": env_or(
            "DEFAULT_DESC", "A minimal, predictable web micro-stack.", source
        ),
        "default_canonical": normalize_url(env_or("DEFAULT_CANONICAL", app_url, source)),
        "default_author": env_or("DEFAULT_AUTHOR", "Max", source),
        "default_keywords": env_or(
            "DEFAULT_KEYWORDS", "python, microstack, htmx, pico.css", source
        ),
        "default_charset": env_or("DEFAULT_CHARSET", "utf-8", source),
        "host": env_or("HOST", "127.0.0.1", source),
        "port": int(env_or("PORT", "8000", source) or 8000),
        "secret_key": env_or("SECRET_KEY", "", source),
        "log_file": Path(env_or("LOG_FILE", None, source) or root / "logs" / "error_log.txt"),
        "database": env_or("DATABASE_URL", None, source),
        "rate_limit_file": Path(
            env_or("RATE_LIMIT_FILE", None, source) or root / "storage" / "rate_limits.json"
        ),
        "cache_used": cache_used,
        "env": {key: source[key] for key in (*REQUIRED_KEYS, *pairs) if key in source},
    }
    values.update(overrides)
    return AppConfig(**values)  # type: ignore[arg-type]
