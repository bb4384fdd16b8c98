"""Decide which preprocessors run for a renderer and where output goes."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol

from mdtome.pipeline import DEFAULT_PREPROCESSORS


class _Preprocessor(Protocol):
    name: str

    def supports_renderer(self, renderer: str) -> bool: ...


def _lookup(config: Mapping[str, Any], dotted_key: str) -> Any:
    """Follow a dotted key such as ``preprocessor.links.renderers`` through nested tables."""
    value: Any = config
    for part in dotted_key.split("."):
        if not isinstance(value, Mapping) or part not in value:
            return None
        value = value[part]
    return value


def _use_default_preprocessors(config: Mapping[str, Any]) -> bool:
    value = _lookup(config, "build.use-default-preprocessors")
    return True if value is None else bool(value)


def is_default_preprocessor(name: str) -> bool:
    """Return whether ``name`` is one of the built-in preprocessors."""
    return name in DEFAULT_PREPROCESSORS


def preprocessor_should_run(
    preprocessor: _Preprocessor, renderer_name: str, config: Mapping[str, Any]
) -> bool:
    """Decide whether ``preprocessor`` runs before the renderer ``renderer_name``.

    Built-in preprocessors run whenever they support the renderer, as long as
    default preprocessors are enabled. Otherwise an explicit
    ``preprocessor.<name>.renderers`` list decides, and failing that the
    preprocessor is asked itself.
    """
    if _use_default_preprocessors(config) and is_default_preprocessor(preprocessor.name):
        return preprocessor.supports_renderer(renderer_name)

    explicit = _lookup(config, f"preprocessor.{preprocessor.name}.renderers")
    if isinstance(explicit, list):
        return any(isinstance(name, str) and name == renderer_name for name in explicit)

    return preprocessor.supports_renderer(renderer_name)


def build_dir_for(
    root: str | Path, build_dir: str | Path, renderer_count: int, backend_name: str
) -> Path:
    """Return where a backend writes its output.

    With at most one renderer the build directory is used as is; with more,
    each renderer gets its own sub-directory named after it.
    """
    base = Path(root) / build_dir
    if renderer_count <= 1:
        return base
    return base / backend_name