"""
File system plugin repository.

Discovers plugin sources under one or more roots, loads them through
the sandboxed loaders and serves them by ID. Two ID namespaces are
kept independently: SLI plugins and SLO plugins.

Reloading is atomic: the new caches are built without holding the
lock, then both are swapped in together. Readers always see either the
old or the new snapshot, never a mix.
"""

from __future__ import annotations

import os
import threading
from pathlib import Path
from typing import Dict, Iterable, Iterator, Tuple

import structlog

from slogen.core.errors import PluginCollisionError, PluginLoadError, PluginNotFoundError
from slogen.plugins.loader import SLIPlugin, SLIPluginLoader, SLOPlugin, SLOPluginLoader

logger = structlog.get_logger()

PLUGIN_FILE_SUFFIX = "plugin.py"

_CONTRIB_PLUGINS_DIR = Path(__file__).parent / "contrib"


def contrib_plugins_path() -> Path:
    """Directory of the plugins shipped with slogen."""
    return _CONTRIB_PLUGINS_DIR


def _try_load(loader, source: str):
    try:
        return loader.load(source), None
    except PluginLoadError as e:
        return None, e


def iter_plugin_files(root: Path) -> Iterator[Path]:
    """Walk ``root`` recursively in sorted order, yielding plugin source files."""
    if not root.is_dir():
        raise PluginLoadError(f"plugins path {str(root)!r} is not a directory")

    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        for filename in sorted(filenames):
            path = Path(dirpath) / filename
            if filename.endswith(PLUGIN_FILE_SUFFIX) and path.is_file():
                yield path


class FilePluginRepository:
    """
    Plugin repository backed by plugin source files.

    Example:
        repo = FilePluginRepository([contrib_plugins_path(), Path("./plugins")])
        plugin = repo.get_slo_plugin("sloth.dev/contrib/info_labels/v1")
    """

    def __init__(
        self,
        paths: Iterable[Path | str],
        strict: bool = False,
        sli_loader: SLIPluginLoader | None = None,
        slo_loader: SLOPluginLoader | None = None,
    ):
        self.paths = [Path(p) for p in paths]
        self.strict = strict
        self._sli_loader = sli_loader or SLIPluginLoader()
        self._slo_loader = slo_loader or SLOPluginLoader()

        self._lock = threading.Lock()
        self._sli_plugins: Dict[str, SLIPlugin] = {}
        self._slo_plugins: Dict[str, SLOPlugin] = {}

        self.reload()

    def reload(self) -> None:
        """Rescan every root and atomically replace the loaded plugins."""
        sli_plugins, slo_plugins = self._load_all()

        with self._lock:
            self._sli_plugins = sli_plugins
            self._slo_plugins = slo_plugins

        logger.info(
            "plugins_loaded",
            sli_plugins=len(sli_plugins),
            slo_plugins=len(slo_plugins),
            paths=[str(p) for p in self.paths],
        )

    def get_sli_plugin(self, plugin_id: str) -> SLIPlugin:
        with self._lock:
            plugin = self._sli_plugins.get(plugin_id)
        if plugin is None:
            raise PluginNotFoundError(plugin_id)
        return plugin

    def get_slo_plugin(self, plugin_id: str) -> SLOPlugin:
        with self._lock:
            plugin = self._slo_plugins.get(plugin_id)
        if plugin is None:
            raise PluginNotFoundError(plugin_id)
        return plugin

    def list_sli_plugins(self) -> Dict[str, SLIPlugin]:
        with self._lock:
            return dict(self._sli_plugins)

    def list_slo_plugins(self) -> Dict[str, SLOPlugin]:
        with self._lock:
            return dict(self._slo_plugins)

    def _load_all(self) -> Tuple[Dict[str, SLIPlugin], Dict[str, SLOPlugin]]:
        sli_plugins: Dict[str, SLIPlugin] = {}
        slo_plugins: Dict[str, SLOPlugin] = {}

        for root in self.paths:
            for path in iter_plugin_files(root):
                try:
                    source = path.read_text(encoding="utf-8")
                except (OSError, UnicodeDecodeError) as e:
                    raise PluginLoadError(f"could not read plugin file {str(path)!r}: {e}") from e

                sli_plugin, sli_error = _try_load(self._sli_loader, source)
                if sli_plugin is not None:
                    if sli_plugin.id in sli_plugins:
                        raise PluginCollisionError(sli_plugin.id, "sli")
                    sli_plugins[sli_plugin.id] = sli_plugin
                    logger.debug("sli_plugin_loaded", plugin_id=sli_plugin.id, path=str(path))
                    continue

                slo_plugin, slo_error = _try_load(self._slo_loader, source)
                if slo_plugin is None:
                    if self.strict:
                        raise PluginLoadError(
                            f"could not load plugin file {str(path)!r}: "
                            f"as SLI plugin: {sli_error.message}; as SLO plugin: {slo_error.message}",
                            details={"path": str(path)},
                        ) from slo_error
                    logger.warning(
                        "plugin_load_skipped",
                        path=str(path),
                        sli_error=sli_error.message,
                        slo_error=slo_error.message,
                    )
                    continue

                if slo_plugin.id in slo_plugins:
                    raise PluginCollisionError(slo_plugin.id, "slo")
                slo_plugins[slo_plugin.id] = slo_plugin
                logger.debug("slo_plugin_loaded", plugin_id=slo_plugin.id, path=str(path))

        return sli_plugins, slo_plugins
