"""Data model for a parsed ``SUMMARY.md``: links, separators, part titles."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from itertools import chain
from typing import Union


@dataclass
class SectionNumber:
    """A section number such as ``1.2.3``, rendered as ``"1.2.3."``."""

    parts: list[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.parts = [int(part) for part in self.parts]

    def __str__(self) -> str:
        if not self.parts:
            return "0"
        return "".join(f"{part}." for part in self.parts)

    def __iter__(self) -> Iterator[int]:
        return iter(self.parts)

    def __len__(self) -> int:
        return len(self.parts)

    def __getitem__(self, index: int) -> int:
        return self.parts[index]

    def __setitem__(self, index: int, value: int) -> None:
        self.parts[index] = value

    def child(self, number: int) -> SectionNumber:
        """Return a new section number one level deeper, ending in ``number``."""
        return SectionNumber([*self.parts, number])

    def copy(self) -> SectionNumber:
        return SectionNumber(list(self.parts))


@dataclass
class Link:
    """An entry in the summary such as ``[Some section](./path/to/file.md)``.

    A ``location`` of ``None`` marks a draft chapter with no source file.
    """

    name: str = ""
    location: str | None = ""
    number: SectionNumber | None = None
    nested_items: list[SummaryItem] = field(default_factory=list)


@dataclass(frozen=True)
class Separator:
    """A horizontal rule (``---``) between summary items."""


@dataclass
class PartTitle:
    """A heading that starts a new part of the numbered chapters."""

    title: str


SummaryItem = Union[Link, Separator, PartTitle]


@dataclass
class Summary:
    """The parsed ``SUMMARY.md``, describing how the book is laid out."""

    title: str | None = None
    prefix_chapters: list[SummaryItem] = field(default_factory=list)
    numbered_chapters: list[SummaryItem] = field(default_factory=list)
    suffix_chapters: list[SummaryItem] = field(default_factory=list)

    def all_items(self) -> Iterator[SummaryItem]:
        """Yield the top-level items: prefix, then numbered, then suffix."""
        return chain(self.prefix_chapters, self.numbered_chapters, self.suffix_chapters)


def update_section_numbers(items: Iterable[SummaryItem], level: int, by: int) -> None:
    """Add ``by`` to the component at ``level`` of every link number, recursively."""
    for item in items:
        if not isinstance(item, Link):
            continue
        if item.number is not None:
            item.number[level] += by
        update_section_numbers(item.nested_items, level, by)


def get_last_link(items: list[SummaryItem]) -> tuple[int, Link]:
    """Return the index and the last :class:`Link` in ``items``.

    Raises :class:`ValueError` when ``items`` holds no links.
    """
    for index in range(len(items) - 1, -1, -1):
        item = items[index]
        if isinstance(item, Link):
            return index, item
    raise ValueError(
        "Unable to get last link because the list of SummaryItems doesn't contain any Links"
    )