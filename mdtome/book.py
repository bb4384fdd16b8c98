"""In-memory representation of a book and loading it from its source directory."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

from mdtome.summary import (
    Link,
    PartTitle,
    SectionNumber,
    Separator,
    Summary,
    SummaryItem,
)
from mdtome.summary_parser import SummaryParseError, parse_summary

log = logging.getLogger(__name__)

_UTF8_BOM = "\ufeff"


class BookError(Exception):
    """Raised when a book cannot be loaded from disk."""


@dataclass
class Chapter:
    """A chapter, usually backed by one file on disk, possibly with sub-chapters.

    ``path`` and ``source_path`` are relative to the directory holding
    ``SUMMARY.md``; both are ``None`` for a draft chapter.
    """

    name: str = ""
    content: str = ""
    number: SectionNumber | None = None
    sub_items: list[BookItem] = field(default_factory=list)
    path: Path | None = None
    source_path: Path | None = None
    parent_names: list[str] = field(default_factory=list)

    @classmethod
    def draft(cls, name: str, parent_names: Iterable[str] = ()) -> Chapter:
        """Create a chapter that has no source file and therefore no content."""
        return cls(name=name, parent_names=list(parent_names))

    def is_draft_chapter(self) -> bool:
        """Return whether the chapter has no source file."""
        return self.path is None

    def __str__(self) -> str:
        if self.number is not None:
            return f"{self.number} {self.name}"
        return self.name


BookItem = Union[Chapter, Separator, PartTitle]


@dataclass
class Book:
    """A tree of chapters, separators and part titles."""

    sections: list[BookItem] = field(default_factory=list)

    def iter(self) -> Iterator[BookItem]:
        """Yield every item depth-first, each chapter before its sub-items."""
        return _walk(self.sections)

    def __iter__(self) -> Iterator[BookItem]:
        return self.iter()

    def for_each_mut(self, func: Callable[[BookItem], object]) -> None:
        """Call ``func`` on every item, visiting a chapter's sub-items before the chapter."""
        _visit_post_order(self.sections, func)

    def push_item(self, item: BookItem) -> Book:
        """Append an item to the top level and return the book."""
        self.sections.append(item)
        return self


def _walk(items: Iterable[BookItem]) -> Iterator[BookItem]:
    for item in items:
        yield item
        if isinstance(item, Chapter):
            yield from _walk(item.sub_items)


def _visit_post_order(items: Iterable[BookItem], func: Callable[[BookItem], object]) -> None:
    for item in items:
        if isinstance(item, Chapter):
            _visit_post_order(item.sub_items, func)
        func(item)


def _escape_brackets(text: str) -> str:
    return text.replace("<", "&lt;").replace(">", "&gt;")


def load_book(src_dir: str | Path, create_missing: bool = True) -> Book:
    """Load a book from its source directory, reading ``SUMMARY.md`` first."""
    src_dir = Path(src_dir)
    summary_md = src_dir / "SUMMARY.md"

    try:
        summary_text = summary_md.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise BookError(f"Couldn't open SUMMARY.md in {str(src_dir)!r} directory") from exc

    try:
        summary = parse_summary(summary_text)
    except SummaryParseError as exc:
        raise BookError(f"Summary parsing failed for file={str(summary_md)!r}: {exc}") from exc

    if create_missing:
        try:
            create_missing_chapters(src_dir, summary)
        except OSError as exc:
            raise BookError(f"Unable to create missing chapters: {exc}") from exc

    return load_book_from_disk(summary, src_dir)


def create_missing_chapters(src_dir: str | Path, summary: Summary) -> None:
    """Create a stub file for every linked chapter whose file does not exist."""
    src_dir = Path(src_dir)
    pending: list[SummaryItem] = list(summary.all_items())

    while pending:
        item = pending.pop()
        if not isinstance(item, Link):
            continue
        if item.location is not None:
            filename = src_dir / item.location
            if not filename.exists():
                filename.parent.mkdir(parents=True, exist_ok=True)
                log.debug("Creating missing file %s", filename)
                with filename.open("w", encoding="utf-8", newline="\n") as handle:
                    handle.write(f"# {_escape_brackets(item.name)}\n")
        pending.extend(item.nested_items)


def load_book_from_disk(summary: Summary, src_dir: str | Path) -> Book:
    """Build a :class:`Book` from a parsed summary, reading chapters from ``src_dir``."""
    log.debug("Loading the book from disk")
    return Book(
        sections=[load_summary_item(item, src_dir, []) for item in summary.all_items()]
    )


def load_summary_item(
    item: SummaryItem, src_dir: str | Path, parent_names: Iterable[str]
) -> BookItem:
    """Turn one summary item into the matching book item."""
    if isinstance(item, Link):
        return load_chapter(item, src_dir, parent_names)
    if isinstance(item, PartTitle):
        return PartTitle(item.title)
    return Separator()


def load_chapter(link: Link, src_dir: str | Path, parent_names: Iterable[str]) -> Chapter:
    """Load the chapter a link points to, together with its nested items."""
    src_dir = Path(src_dir)
    parent_names = list(parent_names)

    if link.location is None:
        chapter = Chapter.draft(link.name, parent_names)
    else:
        link_location = Path(link.location)
        log.debug("Loading %s (%s)", link.name, link_location)
        location = link_location if link_location.is_absolute() else src_dir / link_location

        try:
            raw = location.read_bytes()
        except OSError as exc:
            raise BookError(f"Chapter file not found, {link_location}") from exc
        try:
            content = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise BookError(f'Unable to read "{link.name}" ({location})') from exc
        content = content.removeprefix(_UTF8_BOM)

        try:
            relative = location.relative_to(src_dir)
        except ValueError as exc:
            raise BookError(f"Chapter {location} is not inside the book at {src_dir}") from exc

        chapter = Chapter(
            name=link.name,
            content=content,
            path=relative,
            source_path=relative,
            parent_names=list(parent_names),
        )

    chapter.number = link.number.copy() if link.number is not None else None
    sub_parents = [*parent_names, link.name]
    chapter.sub_items = [
        load_summary_item(nested, src_dir, sub_parents) for nested in link.nested_items
    ]
    return chapter