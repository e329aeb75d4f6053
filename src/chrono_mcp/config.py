from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Final, Optional


@dataclass(frozen=True)
class Settings:
    default_timezone_offset: Optional[int] = None
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8787


_ENV_DEFAULT_TZ: Final[str] = "CHRONO_DEFAULT_TIMEZONE_OFFSET"
_ENV_LOG_LEVEL: Final[str] = "CHRONO_LOG_LEVEL"
_ENV_HOST: Final[str] = "CHRONO_HOST"
_ENV_PORT: Final[str] = "CHRONO_PORT"


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def read_dotenv(path: Path) -> dict[str, str]:
    """
    Minimal .env reader:
    - KEY=VALUE pairs, optionally prefixed with `export`
    - blank lines and `#` comments are skipped
    - one pair of matching quotes around VALUE is removed
    """
    if not path.is_file():
        return {}
    data: dict[str, str] = {}
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if line.startswith("export "):
            line = line[len("export ") :].lstrip()
        key, sep, value = line.partition("=")
        key = key.strip()
        if not sep or not key or key.startswith("#"):
            continue
        data[key] = _unquote(value.strip())
    return data


def _dotenv_path(dotenv_path: Path | None) -> Path:
    # Working directory is the repo root when the service is started from there.
    return dotenv_path or Path.cwd() / ".env"


def load_dotenv_into_env(dotenv_path: Path | None = None) -> None:
    """Copy `.env` keys into os.environ; variables already set are kept."""
    for k, v in read_dotenv(_dotenv_path(dotenv_path)).items():
        os.environ.setdefault(k, v)


def _as_int(name: str, raw: Optional[str]) -> Optional[int]:
    if not raw:
        return None
    try:
        return int(raw.strip())
    except ValueError:
        raise RuntimeError(f"Invalid {name}={raw!r}: expected an integer.") from None


def load_settings(dotenv_path: Path | None = None) -> Settings:
    """
    Settings from environment variables, with `.env` as fallback.

    Every setting has a default, so an empty environment is valid.
    """
    dotenv = read_dotenv(_dotenv_path(dotenv_path))

    def lookup(name: str) -> Optional[str]:
        return os.environ.get(name) or dotenv.get(name)

    port = _as_int(_ENV_PORT, lookup(_ENV_PORT))
    return Settings(
        default_timezone_offset=_as_int(_ENV_DEFAULT_TZ, lookup(_ENV_DEFAULT_TZ)),
        log_level=(lookup(_ENV_LOG_LEVEL) or Settings.log_level).upper(),
        host=lookup(_ENV_HOST) or Settings.host,
        port=Settings.port if port is None else port,
    )
