from __future__ import annotations

import importlib.util
import json
import tomllib
from pathlib import Path
from typing import Optional

import yaml

from .schema import DEFAULT_FACTORIES, Collection, IndexDefinition, SiteConfig
from .utils import parse_bool

CONFIG_NAMES = ("site.config.py", "site.config.toml", "site.config.yaml", "site.config.yml", "site.config.json")
SITE_KEYS = {"title", "collections", "indexes", "languages", "editor"}


class ConfigError(Exception):
    pass


def find_config(root: Path) -> Optional[Path]:
    for name in CONFIG_NAMES:
        path = root / name
        if path.exists():
            return path
    return None


def load_site(path: Path) -> SiteConfig:
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    if path.suffix.lower() == ".py":
        return load_python_site(path)
    return parse_site(load_data(path), path)


def load_python_site(path: Path) -> SiteConfig:
    spec = importlib.util.spec_from_file_location("nova_site_config", path)
    if spec is None or spec.loader is None:
        raise ConfigError(f"Cannot import config file: {path}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    site = getattr(module, "site", None)
    if not isinstance(site, SiteConfig):
        raise ConfigError(f"Config module must define `site` as a SiteConfig: {path}")
    return site


def load_data(path: Path) -> dict:
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
            data = {}
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON in config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config must be a mapping: {path}")
    return data


def parse_collection(name: str, data: object, path: Path) -> Collection:
    if not isinstance(data, dict):
        raise ConfigError(f"Collection {name!r} must be a mapping: {path}")
    missing = [key for key in ("folder", "layout", "url") if not data.get(key)]
    if missing:
        raise ConfigError(f"Collection {name!r} is missing {', '.join(missing)}: {path}")
    defaults = dict(data.get("defaults") or {})
    for field_name, factory in (data.get("default_factories") or {}).items():
        if factory not in DEFAULT_FACTORIES:
            raise ConfigError(f"Unknown default factory {factory!r} for {name}.{field_name}: {path}")
        defaults[field_name] = DEFAULT_FACTORIES[factory]
    try:
        return Collection(
            folder=str(data["folder"]),
            schema=dict(data.get("schema") or {}),
            layout=str(data["layout"]),
            url=str(data["url"]),
            defaults=defaults,
        )
    except ValueError as exc:
        raise ConfigError(f"Collection {name!r}: {exc}: {path}") from exc


def parse_index(data: object, path: Path) -> IndexDefinition:
    if not isinstance(data, dict):
        raise ConfigError(f"Index entries must be mappings: {path}")
    missing = [key for key in ("name", "sources", "path", "layout") if not data.get(key)]
    if missing:
        raise ConfigError(f"Index {data.get('name', '?')!r} is missing {', '.join(missing)}: {path}")
    sources = data["sources"]
    if isinstance(sources, str):
        sources = [sources]
    return IndexDefinition(
        name=str(data["name"]),
        sources=tuple(str(source) for source in sources),
        path=str(data["path"]),
        layout=str(data["layout"]),
        partial=str(data.get("partial") or "index"),
    )


def parse_site(data: dict, path: Path) -> SiteConfig:
    collections = data.get("collections") or {}
    if not isinstance(collections, dict):
        raise ConfigError(f"`collections` must be a mapping: {path}")
    return SiteConfig(
        title=str(data.get("title", "")),
        collections={name: parse_collection(name, value, path) for name, value in collections.items()},
        indexes=tuple(parse_index(item, path) for item in data.get("indexes") or []),
        languages=tuple(data.get("languages") or ()),
        editor=parse_bool(data.get("editor")),
        extra={key: value for key, value in data.items() if key not in SITE_KEYS},
    )
