import pytest

from mdtome.book import Book, Chapter
from mdtome.nop import NopPreprocessor


def make_book():
    book = Book()
    book.push_item(Chapter(name="Chapter 1", content="Hello World!"))
    return book


def test_name():
    assert NopPreprocessor().name == "nop-preprocessor"


def test_run_returns_book_unchanged():
    book = make_book()
    expected = make_book()
    got = NopPreprocessor().run({}, book)
    assert got is book
    assert got == expected


def test_run_ignores_other_preprocessor_settings():
    config = {"preprocessor": {"nop-preprocessor": {"command": "x"}, "other": {"blow-up": True}}}
    book = make_book()
    assert NopPreprocessor().run(config, book) == make_book()


def test_run_blows_up_when_configured():
    config = {"preprocessor": {"nop-preprocessor": {"blow-up": True}}}
    with pytest.raises(RuntimeError, match="Boom!!1!"):
        NopPreprocessor().run(config, make_book())


@pytest.mark.parametrize("renderer, expected", [("html", True), ("not-supported", False)])
def test_supports_renderer(renderer, expected):
    assert NopPreprocessor().supports_renderer(renderer) is expected