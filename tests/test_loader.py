"""Tests for page-map loading."""

import json
import os
from pathlib import Path

import pytest
from docmap.core.cache import NormalizationCache, compute_page_map_digest
from docmap.core.page_map import PageMapError
from docmap.loader import PageMapLoader


def _write(path: Path, data: object, mtime: float) -> None:
    path.write_text(json.dumps(data), encoding="utf-8")
    os.utime(path, (mtime, mtime))


class TestPageMapLoaderLoad:
    """Tests for PageMapLoader.load()."""

    def test__missing_file__raises(self, tmp_path: Path) -> None:
        """Raise FileNotFoundError when the page map is absent."""
        loader = PageMapLoader(tmp_path / "page-map.json")

        with pytest.raises(FileNotFoundError, match="Page map not found"):
            loader.load()

    def test__invalid_file__raises(self, tmp_path: Path) -> None:
        """Raise PageMapError for a malformed page map."""
        path = tmp_path / "page-map.json"
        path.write_text('{"name": "a"}', encoding="utf-8")

        with pytest.raises(PageMapError):
            PageMapLoader(path).load()

    def test__unchanged_file__reuses_parsed_map(self, page_map_file: Path) -> None:
        """Return the same parsed page map while the file is unchanged."""
        loader = PageMapLoader(page_map_file)

        assert loader.load() is loader.load()

    def test__modified_file__reloads(self, tmp_path: Path) -> None:
        """Reload once the file mtime changes."""
        path = tmp_path / "page-map.json"
        _write(path, [{"name": "a", "route": "/a"}], 1000.0)
        loader = PageMapLoader(path)
        first = loader.load()

        _write(path, [{"name": "b", "route": "/b"}], 2000.0)
        second = loader.load()

        assert first is not second
        assert [node.name for node in second] == ["b"]


class TestPageMapLoaderNormalize:
    """Tests for PageMapLoader.normalize()."""

    def test__route__normalized_with_site_theme(self, page_map_file: Path) -> None:
        """Normalize starting from the site theme."""
        loader = PageMapLoader(page_map_file, theme={"toc": False})

        result = loader.normalize("/docs/api")

        assert result.active_item is not None
        assert result.active_item.name == "api"
        assert result.active_theme_context["toc"] is False
        assert result.active_theme_context["sidebar"] is True

    def test__cache__shares_results(self, page_map_file: Path) -> None:
        """Serve repeated routes from the cache."""
        cache = NormalizationCache()
        loader = PageMapLoader(page_map_file, cache)

        first = loader.normalize("/blog")
        second = loader.normalize("/blog")

        assert first is second
        assert len(cache) == 1

    def test__without_cache__recomputes(self, page_map_file: Path) -> None:
        """Compute a fresh result per call without a cache."""
        loader = PageMapLoader(page_map_file)

        assert loader.normalize("/blog") is not loader.normalize("/blog")

    def test__modified_file__drops_stale_results(self, tmp_path: Path) -> None:
        """Invalidate results computed from the previous page map."""
        path = tmp_path / "page-map.json"
        _write(path, [{"name": "a", "route": "/a", "frontMatter": {}}], 1000.0)
        cache = NormalizationCache()
        loader = PageMapLoader(path, cache)
        loader.normalize("/a")

        _write(path, [{"name": "b", "route": "/b", "frontMatter": {}}], 2000.0)
        result = loader.normalize("/b")

        assert len(cache) == 1
        assert result.active_item is not None
        assert result.active_item.name == "b"

    def test__invalidate__clears_cached_results(self, page_map_file: Path) -> None:
        """Forget parsed data and cached results."""
        cache = NormalizationCache()
        loader = PageMapLoader(page_map_file, cache)
        first = loader.normalize("/blog")

        loader.invalidate()

        assert len(cache) == 0
        assert loader.normalize("/blog") is not first

    def test__file_rewritten_while_loading__no_stale_result(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Key each result by the digest of the text it was computed from."""
        path = tmp_path / "page-map.json"
        _write(path, [{"name": "a", "route": "/a", "frontMatter": {}}], 1000.0)
        loader = PageMapLoader(path, NormalizationCache())
        hashed: list[str] = []

        def digest_then_rewrite(source: str) -> str:
            if not hashed:
                _write(path, [{"name": "b", "route": "/b", "frontMatter": {}}], 2000.0)
            hashed.append(source)
            return compute_page_map_digest(source)

        monkeypatch.setattr("docmap.loader.compute_page_map_digest", digest_then_rewrite)
        loader.normalize("/b")
        result = loader.normalize("/b")

        assert result.active_item is not None
        assert result.active_item.name == "b"
