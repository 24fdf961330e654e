"""Configuration loading and saving.

Config file location: ~/.config/classdojo-downloader/config.toml

Schema:
    [auth]
    email = "..."
    password = "..."

    [students]
    ids = ["123", "456"]

    [output]
    images_dir = "images"

    [fetch]
    max_pages = 30
    concurrency = 15

Environment variables override the file:
    DOJO_EMAIL, DOJO_PASSWORD, STUDENTS (comma-separated),
    DOJO_IMAGES_DIR, DOJO_MAX_PAGES, DOJO_CONCURRENCY
"""

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

import tomli_w

from .errors import ConfigError

CONFIG_DIR = Path.home() / ".config" / "classdojo-downloader"
CONFIG_FILE = CONFIG_DIR / "config.toml"

DEFAULT_IMAGES_DIR = Path("images")
DEFAULT_MAX_PAGES = 30
DEFAULT_CONCURRENCY = 15


@dataclass
class Credentials:
    email: str
    password: str


@dataclass
class AppConfig:
    credentials: Credentials
    students: list[str] = field(default_factory=list)
    images_dir: Path = DEFAULT_IMAGES_DIR
    max_pages: int = DEFAULT_MAX_PAGES
    concurrency: int = DEFAULT_CONCURRENCY


def parse_students(value: str | None) -> list[str]:
    """Split a comma-separated student list, dropping blanks."""
    if not value:
        return []
    return [s.strip() for s in value.split(",") if s.strip()]


def _positive_int(name: str, value) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be an integer, got {value!r}") from None
    if number < 1:
        raise ConfigError(f"{name} must be at least 1, got {number}")
    return number


def load_config(
    config_path: Path = CONFIG_FILE,
    environ: Mapping[str, str] | None = None,
) -> AppConfig:
    """Build the config from the TOML file (if any) and the environment.

    Missing credentials are not an error here; login checks them so the
    failure is reported before any request is sent.
    """
    env = os.environ if environ is None else environ

    data: dict = {}
    if config_path.exists():
        with open(config_path, "rb") as f:
            data = tomllib.load(f)

    auth_data = data.get("auth", {})
    output_data = data.get("output", {})
    fetch_data = data.get("fetch", {})

    students = list(data.get("students", {}).get("ids", []))
    if "STUDENTS" in env:
        students = parse_students(env["STUDENTS"])

    return AppConfig(
        credentials=Credentials(
            email=env.get("DOJO_EMAIL") or auth_data.get("email", ""),
            password=env.get("DOJO_PASSWORD") or auth_data.get("password", ""),
        ),
        students=[str(s) for s in students],
        images_dir=Path(
            env.get("DOJO_IMAGES_DIR")
            or output_data.get("images_dir", DEFAULT_IMAGES_DIR)
        ),
        max_pages=_positive_int(
            "max_pages",
            env.get("DOJO_MAX_PAGES") or fetch_data.get("max_pages", DEFAULT_MAX_PAGES),
        ),
        concurrency=_positive_int(
            "concurrency",
            env.get("DOJO_CONCURRENCY")
            or fetch_data.get("concurrency", DEFAULT_CONCURRENCY),
        ),
    )


def save_config(config: AppConfig, config_path: Path = CONFIG_FILE) -> None:
    """Write config to TOML file with restricted permissions."""
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = {
        "auth": {
            "email": config.credentials.email,
            "password": config.credentials.password,
        },
        "students": {"ids": list(config.students)},
        "output": {"images_dir": str(config.images_dir)},
        "fetch": {
            "max_pages": config.max_pages,
            "concurrency": config.concurrency,
        },
    }

    with open(config_path, "wb") as f:
        tomli_w.dump(data, f)

    # File contains the account password
    os.chmod(config_path, 0o600)


def config_exists(config_path: Path = CONFIG_FILE) -> bool:
    """Check if config file exists."""
    return config_path.exists()
