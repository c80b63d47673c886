from __future__ import annotations

import dataclasses
import json
import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

import yaml

from .utils import parse_int

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
PATH_FIELDS = {"source_dir", "output_dir", "templates_dir"}
INT_FIELDS = {"port", "workers", "timeout"}


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class SiteConfig:
    source_dir: Path = Path("entries")
    output_dir: Path = Path("pages")
    templates_dir: Path = TEMPLATES_DIR
    site_title: str = "blogkit"
    site_url: str = "http://localhost:4000"
    site_description: str = "Programming things"
    language: str = "en-us"
    blog_path: str = "/blog/"
    host: str = "0.0.0.0"
    port: int = 4000
    env: str = "production"
    basic_auth_user: str = ""
    basic_auth_pass: str = ""
    workers: int = 0
    highlight_style: str = "default"
    timeout: int = 60

    @property
    def drafts_dir(self) -> Path:
        return self.source_dir / "draft"

    @property
    def published_dir(self) -> Path:
        return self.source_dir / "published"

    @property
    def is_development(self) -> bool:
        return self.env == "development"

    def replace(self, **overrides: object) -> SiteConfig:
        return dataclasses.replace(self, **_coerce(overrides))

    @classmethod
    def from_mapping(
        cls, data: Mapping[str, object], environ: Mapping[str, str] | None = None
    ) -> SiteConfig:
        """Build a config from file values, then apply environment overrides.

        Unknown keys are ignored so one config file can be shared with other
        tools. ``PORT``, ``ENV``, ``BASIC_AUTH_USER`` and ``BASIC_AUTH_PASS``
        win over the file.
        """
        environ = os.environ if environ is None else environ
        names = {f.name for f in dataclasses.fields(cls)}
        values = {key: value for key, value in data.items() if key in names and value is not None}
        env_map = {
            "PORT": "port",
            "ENV": "env",
            "BASIC_AUTH_USER": "basic_auth_user",
            "BASIC_AUTH_PASS": "basic_auth_pass",
        }
        for var, key in env_map.items():
            if environ.get(var):
                values[key] = environ[var]
        return cls(**_coerce(values))


def _coerce(values: Mapping[str, object]) -> dict:
    defaults = SiteConfig()
    out = {}
    for key, value in values.items():
        if key in PATH_FIELDS:
            value = Path(str(value))
        elif key in INT_FIELDS:
            value = parse_int(value, getattr(defaults, key))
        elif value is not None:
            value = str(value)
        out[key] = value
    return out


def load_config(path: Path) -> dict:
    if not path.exists():
        return {}
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix == ".toml":
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Invalid TOML in config file {path}: {exc}") from exc
    elif suffix in {".yml", ".yaml"}:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in config file {path}: {exc}") from exc
        if data is None:
            return {}
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON in config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file must be a mapping: {path}")
    return data
