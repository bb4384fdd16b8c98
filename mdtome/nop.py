"""A preprocessor that hands the book back unchanged."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from mdtome.book import Book


class NopPreprocessor:
    """A no-op preprocessor, useful as an example and for testing the pipeline."""

    name = "nop-preprocessor"

    def run(self, config: Mapping[str, Any], book: Book) -> Book:
        """Return ``book`` untouched.

        Raises :class:`RuntimeError` when ``preprocessor.nop-preprocessor``
        in the configuration contains a ``blow-up`` key.
        """
        preprocessors = config.get("preprocessor")
        if isinstance(preprocessors, Mapping):
            own = preprocessors.get(self.name)
            if isinstance(own, Mapping) and "blow-up" in own:
                raise RuntimeError("Boom!!1!")
        return book

    def supports_renderer(self, renderer: str) -> bool:
        """Every renderer is supported except one literally named ``not-supported``."""
        return renderer != "not-supported"