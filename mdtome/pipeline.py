"""Work out which renderers and preprocessors a book configuration asks for.

The configuration is the parsed ``book.toml`` as a nested mapping, the shape
:func:`tomllib.loads` returns.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

log = logging.getLogger(__name__)

COMMAND_PREFIX = "mdtome-"
LINKS = "links"
INDEX = "index"
DEFAULT_PREPROCESSORS = (LINKS, INDEX)
BUILTIN_RENDERERS = ("html", "markdown")


class PipelineError(ValueError):
    """Raised when the renderer or preprocessor configuration is invalid."""


@dataclass(frozen=True)
class RendererSpec:
    """A renderer to run; ``command`` is ``None`` for a built-in renderer."""

    name: str
    command: str | None = None

    @property
    def is_builtin(self) -> bool:
        return self.command is None


@dataclass(frozen=True)
class PreprocessorSpec:
    """A preprocessor to run; ``command`` is ``None`` for a built-in one."""

    name: str
    command: str | None = None

    @property
    def is_builtin(self) -> bool:
        return self.command is None

    def supports_renderer(self, renderer: str) -> bool:
        """Report whether this preprocessor should run for ``renderer``.

        Built-in preprocessors support every renderer. An external one is
        asked by running ``<command> supports <renderer>``; exit status zero
        means it is supported.
        """
        if self.command is None:
            return True
        args = [*shlex.split(self.command), "supports", renderer]
        try:
            result = subprocess.run(
                args,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=False,
            )
        except OSError as exc:
            log.warning(
                "Unable to run the %s preprocessor (%r): %s", self.name, self.command, exc
            )
            return False
        return result.returncode == 0


def _table(value: Any) -> Mapping[str, Any] | None:
    return value if isinstance(value, Mapping) else None


def _use_default_preprocessors(config: Mapping[str, Any]) -> bool:
    build = _table(config.get("build")) or {}
    return bool(build.get("use-default-preprocessors", True))


def _command_from(key: str, table: Any) -> str:
    entries = _table(table)
    command = entries.get("command") if entries is not None else None
    return command if isinstance(command, str) else f"{COMMAND_PREFIX}{key}"


def get_custom_preprocessor_cmd(key: str, table: Any) -> str:
    """Return the command configured for a preprocessor, or the default name."""
    return _command_from(key, table)


def interpret_custom_renderer(key: str, table: Any) -> RendererSpec:
    """Build a renderer that runs an external command."""
    return RendererSpec(key, _command_from(key, table))


def determine_renderers(config: Mapping[str, Any]) -> list[RendererSpec]:
    """Return the renderers listed under ``output``, defaulting to HTML."""
    renderers = []
    output = _table(config.get("output"))
    if output is not None:
        for key, table in sorted(output.items()):
            if key in BUILTIN_RENDERERS:
                renderers.append(RendererSpec(key))
            else:
                renderers.append(interpret_custom_renderer(key, table))
    return renderers or [RendererSpec("html")]


class _DependencyGraph:
    """Nodes with precedence edges, drained in batches of ready nodes."""

    def __init__(self) -> None:
        self._preds: dict[str, set[str]] = {}
        self._succs: dict[str, set[str]] = {}

    def insert(self, name: str) -> None:
        self._preds.setdefault(name, set())
        self._succs.setdefault(name, set())

    def add_dependency(self, first: str, then: str) -> None:
        self.insert(first)
        self.insert(then)
        self._preds[then].add(first)
        self._succs[first].add(then)

    def pop_all(self) -> list[str]:
        ready = [name for name, preds in self._preds.items() if not preds]
        for name in ready:
            del self._preds[name]
            for succ in self._succs.pop(name):
                self._preds[succ].discard(name)
        return ready

    def __len__(self) -> int:
        return len(self._preds)


def _string_list(value: Any, name: str, field_name: str) -> Iterable[str]:
    if not isinstance(value, list):
        raise PipelineError(f"Expected preprocessor.{name}.{field_name} to be an array")
    for entry in value:
        if not isinstance(entry, str):
            raise PipelineError(
                f"Expected preprocessor.{name}.{field_name} to contain strings"
            )
        yield entry


def determine_preprocessors(config: Mapping[str, Any]) -> list[PreprocessorSpec]:
    """Return the preprocessors to run, ordered by their ``before``/``after`` keys.

    Ties are broken by code-point order of the names. A cycle raises
    :class:`PipelineError`.
    """
    use_defaults = _use_default_preprocessors(config)
    graph = _DependencyGraph()

    if use_defaults:
        for name in DEFAULT_PREPROCESSORS:
            graph.insert(name)

    table = _table(config.get("preprocessor"))
    if table is not None:

        def exists(name: str) -> bool:
            return (use_defaults and name in DEFAULT_PREPROCESSORS) or name in table

        for name, entry in sorted(table.items()):
            graph.insert(name)
            entries = _table(entry) or {}

            if "before" in entries:
                for later in _string_list(entries["before"], name, "before"):
                    if exists(later):
                        graph.add_dependency(name, later)
                    else:
                        log.warning(
                            'preprocessor.%s.before contains "%s", which was not found',
                            name,
                            later,
                        )

            if "after" in entries:
                for earlier in _string_list(entries["after"], name, "after"):
                    if exists(earlier):
                        graph.add_dependency(earlier, name)
                    else:
                        log.warning(
                            'preprocessor.%s.after contains "%s", which was not found',
                            name,
                            earlier,
                        )

    preprocessors = []
    while batch := graph.pop_all():
        for name in sorted(batch):
            if name in DEFAULT_PREPROCESSORS:
                preprocessors.append(PreprocessorSpec(name))
            else:
                command = get_custom_preprocessor_cmd(name, table[name])
                preprocessors.append(PreprocessorSpec(name, command))

    if len(graph):
        raise PipelineError("Cyclic dependency detected in preprocessors")
    return preprocessors