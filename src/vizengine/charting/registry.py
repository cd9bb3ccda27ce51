"""Chart registry.

Maps chart type names to builders. A builder receives the request and the
resolved, validated ``ChartOptions`` and returns a ``ChartResult`` holding
the geometry snapshot. The registry adds build timing, lazy building and
an LRU snapshot cache keyed by the sha256 of the canonical request JSON.
"""

from __future__ import annotations

import hashlib
import json
import logging
from collections import OrderedDict
from dataclasses import dataclass
from time import perf_counter
from typing import Any, Callable, Dict, Optional, Protocol

from ..config import ChartOptions
from .common import resolve_options
from .types import ChartRequest, ChartResult, canonical

__all__ = [
    "ChartType",
    "ChartRegistry",
    "ChartRegistrar",
    "ChartPluginProtocol",
    "LazyChartProxy",
    "chart_registry",
    "register_chart_type",
    "register_chart_plugin",
    "request_key",
]

log = logging.getLogger(__name__)

Builder = Callable[[ChartRequest, ChartOptions], ChartResult]


@dataclass
class ChartType:
    """Metadata for a registered chart type."""

    chart_type: str
    builder: Builder
    description: str
    plugin_id: Optional[str] = None
    plugin_version: Optional[str] = None
    meta: Dict[str, Any] | None = None


class ChartPluginProtocol(Protocol):  # pragma: no cover - structural only
    """A plugin supplies an id, a version and a ``register`` callback."""

    id: str
    version: str

    def register(self, registrar: "ChartRegistrar") -> None:  # noqa: D401
        ...


class ChartRegistrar:
    """Handed to plugins so their chart types are tagged with the plugin id."""

    def __init__(self, registry: "ChartRegistry", plugin_id: str, version: str) -> None:
        self._registry = registry
        self._plugin_id = plugin_id
        self._version = version

    def register(self, chart_type: str, builder: Builder, description: str, **meta: Any) -> None:
        self._registry.register(
            chart_type,
            builder,
            description,
            plugin_id=self._plugin_id,
            plugin_version=self._version,
            meta=meta or None,
        )


def request_key(req: ChartRequest) -> str:
    """sha256 of the canonical JSON of type, data and options."""
    options = req.options.cache_material() if isinstance(req.options, ChartOptions) else req.options
    material = {"type": req.chart_type, "data": req.data, "options": options}
    payload = json.dumps(canonical(material), sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class ChartRegistry:
    def __init__(self, *, cache_limit: int = 32) -> None:
        self._types: Dict[str, ChartType] = {}
        self._plugins: Dict[str, str] = {}  # plugin_id -> version
        self._snapshot_cache: "OrderedDict[str, ChartResult]" = OrderedDict()
        self._snapshot_cache_limit = cache_limit

    # ---------------- Type registration -------------------------------
    def register(
        self,
        chart_type: str,
        builder: Builder,
        description: str,
        *,
        plugin_id: str | None = None,
        plugin_version: str | None = None,
        meta: Dict[str, Any] | None = None,
    ) -> None:
        if chart_type in self._types:
            raise ValueError(f"Chart type already registered: {chart_type}")
        self._types[chart_type] = ChartType(
            chart_type, builder, description, plugin_id=plugin_id, plugin_version=plugin_version, meta=meta
        )

    def unregister(self, chart_type: str) -> None:
        if self._types.pop(chart_type, None) is None:
            raise KeyError(f"Unknown chart type: {chart_type}")

    def get(self, chart_type: str) -> ChartType:
        ct = self._types.get(chart_type)
        if ct is None:
            raise KeyError(f"Unknown chart type: {chart_type}")
        return ct

    def __contains__(self, chart_type: object) -> bool:
        return chart_type in self._types

    # ---------------- Building ----------------------------------------
    def build(self, req: ChartRequest) -> ChartResult:
        """Build eagerly; options are validated before the builder runs."""
        ct = self.get(req.chart_type)
        options = resolve_options(req.options)
        start = perf_counter()
        result = ct.builder(req, options)
        elapsed = (perf_counter() - start) * 1000.0
        result.meta.setdefault("build_ms", elapsed)
        result.meta.setdefault("elements", len(result.snapshot.elements))
        log.debug("built %s (%d elements, %.2f ms)", req.chart_type, len(result.snapshot.elements), elapsed)
        return result

    def build_lazy(self, req: ChartRequest) -> "LazyChartProxy":
        return LazyChartProxy(self, req)

    def build_cached(self, req: ChartRequest) -> ChartResult:
        """Return the cached result for an identical request, building on a miss.

        A hit is marked ``cache_hit=True`` in the result meta so callers can
        tell reuse from the first build.
        """
        key = request_key(req)
        cached = self._snapshot_cache.get(key)
        if cached is not None:
            self._snapshot_cache.move_to_end(key)
            cached.meta["cache_hit"] = True
            return cached
        result = self.build(req)
        result.meta.setdefault("cache_hit", False)
        self._snapshot_cache[key] = result
        if len(self._snapshot_cache) > self._snapshot_cache_limit:
            self._snapshot_cache.popitem(last=False)
        return result

    def clear_cache(self) -> None:
        self._snapshot_cache.clear()

    def list_types(self) -> Dict[str, str]:
        return {k: v.description for k, v in self._types.items()}

    def list_types_by_plugin(self, plugin_id: str) -> Dict[str, str]:
        return {k: v.description for k, v in self._types.items() if v.plugin_id == plugin_id}

    # ---------------- Plugins -----------------------------------------
    def register_plugin(self, plugin: ChartPluginProtocol) -> None:
        if plugin.id in self._plugins:
            raise ValueError(f"Plugin already registered: {plugin.id}")
        plugin.register(ChartRegistrar(self, plugin.id, plugin.version))
        # Recorded only after register() succeeded
        self._plugins[plugin.id] = plugin.version

    def list_plugins(self) -> Dict[str, str]:
        return dict(self._plugins)


chart_registry = ChartRegistry()


class LazyChartProxy:
    """Defers building until ``materialize()`` or ``snapshot`` is accessed."""

    __slots__ = ("_registry", "_req", "_result")

    def __init__(self, registry: ChartRegistry, req: ChartRequest) -> None:
        self._registry = registry
        self._req = req
        self._result: ChartResult | None = None

    def materialize(self) -> ChartResult:
        if self._result is None:
            self._result = self._registry.build(self._req)
            self._result.meta.setdefault("lazy", True)
        return self._result

    @property
    def snapshot(self):
        return self.materialize().snapshot

    @property
    def built(self) -> bool:
        return self._result is not None

    @property
    def meta(self) -> Dict[str, Any]:
        if self._result is None:
            return {"lazy": True, "built": False}
        return self._result.meta


def register_chart_type(chart_type: str, builder: Builder, description: str) -> None:
    chart_registry.register(chart_type, builder, description)


def register_chart_plugin(plugin: ChartPluginProtocol) -> None:
    chart_registry.register_plugin(plugin)
