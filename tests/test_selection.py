from pathlib import Path

import pytest

from mdtome.pipeline import PreprocessorSpec
from mdtome.selection import (
    build_dir_for,
    is_default_preprocessor,
    preprocessor_should_run,
)


class BoolPreprocessor:
    name = "bool-preprocessor"

    def __init__(self, answer):
        self.answer = answer

    def supports_renderer(self, renderer):
        return self.answer


@pytest.mark.parametrize("name, expected", [("links", True), ("index", True), ("random", False)])
def test_is_default_preprocessor(name, expected):
    assert is_default_preprocessor(name) is expected


def test_config_respects_preprocessor_selection():
    config = {"preprocessor": {"links": {"renderers": ["html"]}}}
    assert preprocessor_should_run(PreprocessorSpec("links"), "html", config) is True


@pytest.mark.parametrize("should_be", [True, False])
def test_falls_back_to_supports_renderer_method(should_be):
    got = preprocessor_should_run(BoolPreprocessor(should_be), "html", {})
    assert got is should_be


def test_explicit_renderers_list_decides_for_custom_preprocessor():
    config = {"preprocessor": {"random": {"renderers": ["html"]}}}
    spec = PreprocessorSpec("random", "does-not-exist-anywhere")
    assert preprocessor_should_run(spec, "html", config) is True
    assert preprocessor_should_run(spec, "epub", config) is False


def test_explicit_list_overrides_supports_renderer():
    config = {"preprocessor": {"bool-preprocessor": {"renderers": ["markdown"]}}}
    assert preprocessor_should_run(BoolPreprocessor(True), "html", config) is False
    assert preprocessor_should_run(BoolPreprocessor(False), "markdown", config) is True


def test_default_preprocessor_uses_renderers_list_when_defaults_disabled():
    config = {
        "build": {"use-default-preprocessors": False},
        "preprocessor": {"links": {"renderers": ["markdown"]}},
    }
    assert preprocessor_should_run(PreprocessorSpec("links"), "html", config) is False
    assert preprocessor_should_run(PreprocessorSpec("links"), "markdown", config) is True


def test_default_preprocessor_ignores_renderers_list_when_defaults_enabled():
    config = {"preprocessor": {"index": {"renderers": ["markdown"]}}}
    assert preprocessor_should_run(PreprocessorSpec("index"), "html", config) is True


def test_build_dir_single_renderer(tmp_path):
    assert build_dir_for(tmp_path, "book", 1, "html") == tmp_path / "book"


def test_build_dir_no_renderers(tmp_path):
    assert build_dir_for(tmp_path, "book", 0, "html") == tmp_path / "book"


def test_build_dir_multiple_renderers():
    got = build_dir_for("root", "outputs", 2, "markdown")
    assert got == Path("root") / "outputs" / "markdown"