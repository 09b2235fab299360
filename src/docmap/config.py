"""Configuration management for docmap.

Settings live in a ``docmap.toml`` file, found by walking up from the
working directory when no path is given. Every section is optional.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, cast

from docmap.core.types import THEME_KEYS, PageTheme

CONFIG_FILENAME = "docmap.toml"

_THEME_STR_KEYS = frozenset({"layout", "typesetting"})
_TYPE_NAMES = {str: "string", int: "integer", bool: "boolean"}


@dataclass
class ServerConfig:
    """Address the API server binds to."""

    host: str = "127.0.0.1"
    port: int = 8080


@dataclass
class SiteConfig:
    """Where the site's page map is read from."""

    page_map: Path = field(default_factory=lambda: Path("page-map.json"))


@dataclass
class CacheConfig:
    """Normalization cache settings."""

    enabled: bool = True
    max_entries: int = 256


@dataclass
class LiveReloadConfig:
    """Page-map watching settings."""

    enabled: bool = True


@dataclass
class Config:
    """docmap settings, one dataclass per TOML section."""

    server: ServerConfig
    site: SiteConfig
    theme: PageTheme
    cache: CacheConfig
    live_reload: LiveReloadConfig
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> Config:
        """Read settings from a TOML file.

        Without an explicit path, docmap.toml is looked up in the current
        directory and its parents; when none exists the defaults are used.

        Raises:
            FileNotFoundError: If the given config_path is missing
            ValueError: If the file is malformed or a value has the wrong type
        """
        if config_path is None:
            config_path = cls._discover_config()
            if config_path is None:
                return cls._default()
        elif not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        return cls._load_from_file(config_path)

    @classmethod
    def _parse_server(cls, section: dict[str, Any]) -> ServerConfig:
        return ServerConfig(
            host=_get(section, "server", "host", str, "127.0.0.1"),
            port=_get(section, "server", "port", int, 8080),
        )

    @classmethod
    def _parse_site(cls, section: dict[str, Any], config_dir: Path) -> SiteConfig:
        page_map = _get(section, "site", "page_map", str, "page-map.json")
        return SiteConfig(page_map=config_dir / page_map)

    @classmethod
    def _parse_theme(cls, section: dict[str, Any]) -> PageTheme:
        """Validate the [theme] table; only configured keys are returned."""
        theme: dict[str, object] = {}
        for key in section:
            if key not in THEME_KEYS:
                raise ValueError(f"theme.{key} is not a known theme option")
            kind = str if key in _THEME_STR_KEYS else bool
            theme[key] = _get(section, "theme", key, kind, None)
        return cast(PageTheme, theme)

    @classmethod
    def _parse_cache(cls, section: dict[str, Any]) -> CacheConfig:
        enabled = _get(section, "cache", "enabled", bool, True)
        max_entries = _get(section, "cache", "max_entries", int, 256)
        if max_entries < 1:
            raise ValueError("cache.max_entries must be positive")
        return CacheConfig(enabled=enabled, max_entries=max_entries)

    @classmethod
    def _parse_live_reload(cls, section: dict[str, Any]) -> LiveReloadConfig:
        return LiveReloadConfig(enabled=_get(section, "live_reload", "enabled", bool, True))

    @classmethod
    def _discover_config(cls) -> Path | None:
        cwd = Path.cwd()
        for directory in (cwd, *cwd.parents):
            candidate = directory / CONFIG_FILENAME
            if candidate.exists():
                return candidate
        return None

    @classmethod
    def _default(cls) -> Config:
        return cls(
            server=ServerConfig(),
            site=SiteConfig(),
            theme=PageTheme(),
            cache=CacheConfig(),
            live_reload=LiveReloadConfig(),
        )

    @classmethod
    def _load_from_file(cls, path: Path) -> Config:
        try:
            data = tomllib.loads(path.read_text(encoding="utf-8"))
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid TOML in {path}: {e}") from e

        return cls(
            server=cls._parse_server(_section(data, "server")),
            # Relative page-map paths resolve against the config file
            site=cls._parse_site(_section(data, "site"), path.parent),
            theme=cls._parse_theme(_section(data, "theme")),
            cache=cls._parse_cache(_section(data, "cache")),
            live_reload=cls._parse_live_reload(_section(data, "live_reload")),
            config_path=path,
        )

    def with_overrides(
        self,
        *,
        host: str | None = None,
        port: int | None = None,
        page_map: Path | None = None,
        cache_enabled: bool | None = None,
        live_reload_enabled: bool | None = None,
    ) -> Config:
        """Return a copy with command-line values applied.

        Arguments left as None keep the configured value.
        """
        server = replace(
            self.server,
            host=self.server.host if host is None else host,
            port=self.server.port if port is None else port,
        )
        site = self.site if page_map is None else replace(self.site, page_map=page_map)
        cache = self.cache if cache_enabled is None else replace(self.cache, enabled=cache_enabled)
        live_reload = (
            self.live_reload
            if live_reload_enabled is None
            else replace(self.live_reload, enabled=live_reload_enabled)
        )
        return replace(self, server=server, site=site, cache=cache, live_reload=live_reload)


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name, {})
    if not isinstance(section, dict):
        raise ValueError(f"{name} section must be a dictionary")
    return section


def _get(section: dict[str, Any], name: str, key: str, kind: type, default: Any) -> Any:
    """Look up a typed value; bools never pass as integers."""
    value = section.get(key, default)
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        article = "an" if kind is int else "a"
        raise ValueError(f"{name}.{key} must be {article} {_TYPE_NAMES[kind]}")
    return value

