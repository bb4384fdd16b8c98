"""Parser that turns the text of a ``SUMMARY.md`` into a :class:`Summary`.

The Markdown is tokenised with markdown-it and flattened into a stream of
start/end/text events, which a small recursive-descent parser then walks.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum, auto

from markdown_it import MarkdownIt
from markdown_it.token import Token

from mdtome.summary import (
    Link,
    PartTitle,
    SectionNumber,
    Separator,
    Summary,
    SummaryItem,
    get_last_link,
    update_section_numbers,
)

log = logging.getLogger(__name__)


class SummaryParseError(ValueError):
    """Raised when a ``SUMMARY.md`` does not follow the expected layout."""


class EventKind(Enum):
    START = auto()
    END = auto()
    TEXT = auto()
    CODE = auto()
    SOFT_BREAK = auto()
    HARD_BREAK = auto()
    RULE = auto()
    HTML = auto()
    OTHER = auto()


@dataclass(frozen=True)
class Tag:
    """The element a start or end event belongs to."""

    name: str
    level: int = 0
    href: str = ""


@dataclass(frozen=True)
class Event:
    """One step in the flattened Markdown stream."""

    kind: EventKind
    tag: Tag | None = None
    text: str = ""
    offset: int = field(default=0, compare=False)

    def is_start(self, name: str, level: int | None = None) -> bool:
        return self._matches(EventKind.START, name, level)

    def is_end(self, name: str, level: int | None = None) -> bool:
        return self._matches(EventKind.END, name, level)

    def _matches(self, kind: EventKind, name: str, level: int | None) -> bool:
        if self.kind is not kind or self.tag is None or self.tag.name != name:
            return False
        return level is None or self.tag.level == level


class _SummaryMarkdown(MarkdownIt):
    """CommonMark parser that keeps link destinations as written.

    Destinations are not percent-encoded; only an encoded space is turned
    back into a literal one, since chapter paths are file names.
    """

    def normalizeLink(self, url: str) -> str:  # noqa: N802 - overrides library hook
        return url.replace("%20", " ")

    def validateLink(self, url: str) -> bool:  # noqa: N802 - overrides library hook
        # Any scheme is allowed: summary links are file locations, never followed.
        return not any(ch in url for ch in "\r\n")


_TAG_NAMES = {
    "bullet_list": "list",
    "ordered_list": "list",
    "list_item": "item",
    "em": "emphasis",
}

_LEAF_KINDS = {
    "text": EventKind.TEXT,
    "text_special": EventKind.TEXT,
    "code_inline": EventKind.CODE,
    "softbreak": EventKind.SOFT_BREAK,
    "hardbreak": EventKind.HARD_BREAK,
    "hr": EventKind.RULE,
    "html_block": EventKind.HTML,
    "html_inline": EventKind.HTML,
}


def _make_tag(token: Token) -> Tag:
    name = token.type.removesuffix("_open")
    name = _TAG_NAMES.get(name, name)
    if name == "heading":
        return Tag(name, level=int(token.tag[1:]))
    if name == "link":
        return Tag(name, href=str(token.attrGet("href") or ""))
    return Tag(name)


def _line_starts(text: str) -> list[int]:
    return [0, *(match.end() for match in re.finditer(r"\r\n|\r|\n", text))]


def _to_events(
    tokens: Iterable[Token],
    line_starts: list[int],
    offset: int,
    stack: list[tuple[Tag, int]],
) -> Iterator[Event]:
    for token in tokens:
        if token.map:
            offset = line_starts[min(token.map[0], len(line_starts) - 1)]
        if token.hidden and token.type.startswith("paragraph"):
            continue

        if token.nesting == 1:
            tag = _make_tag(token)
            stack.append((tag, offset))
            yield Event(EventKind.START, tag, offset=offset)
        elif token.nesting == -1:
            tag, start = stack.pop()
            yield Event(EventKind.END, tag, offset=start)
        elif token.type == "inline":
            yield from _to_events(token.children or [], line_starts, offset, stack)
        elif token.type == "image":
            tag = Tag("image", href=str(token.attrGet("src") or ""))
            yield Event(EventKind.START, tag, offset=offset)
            yield from _to_events(token.children or [], line_starts, offset, stack)
            yield Event(EventKind.END, tag, offset=offset)
        elif token.type in ("code_block", "fence"):
            tag = Tag("codeblock")
            yield Event(EventKind.START, tag, offset=offset)
            yield Event(EventKind.TEXT, text=token.content, offset=offset)
            yield Event(EventKind.END, tag, offset=offset)
        else:
            kind = _LEAF_KINDS.get(token.type, EventKind.OTHER)
            yield Event(kind, text=token.content, offset=offset)


def _events(text: str) -> Iterator[Event]:
    tokens = _SummaryMarkdown("commonmark").parse(text)
    return _to_events(tokens, _line_starts(text), 0, [])


def stringify_events(tokens: Iterable[Event]) -> str:
    """Strip styling from a run of events and return only the plain text."""
    pieces = []
    for event in tokens:
        if event.kind in (EventKind.TEXT, EventKind.CODE):
            pieces.append(event.text)
        elif event.kind is EventKind.SOFT_BREAK:
            pieces.append(" ")
    return "".join(pieces)


def parse_summary(text: str) -> Summary:
    """Parse the text of a ``SUMMARY.md`` into a :class:`Summary`."""
    return SummaryParser(text).parse()


class SummaryParser:
    """Recursive-descent parser over the events of a ``SUMMARY.md``."""

    def __init__(self, text: str) -> None:
        self._src = text
        self._stream = _events(text)
        self._offset = 0
        self._back: Event | None = None
        self._root_items = 0

    def current_location(self) -> tuple[int, int]:
        """Return the (line, column) of the last event read, for error messages."""
        previous = self._src[: self._offset]
        line = previous.count("\n") + 1
        start_of_line = max(previous.rfind("\n"), 0)
        column = len(self._src[start_of_line : self._offset])
        return line, column

    def next_event(self) -> Event | None:
        """Return the next event, or ``None`` at the end of the text."""
        if self._back is not None:
            event, self._back = self._back, None
        else:
            event = next(self._stream, None)
            if event is not None:
                self._offset = event.offset
        log.debug("Next event: %r", event)
        return event

    def push_back(self, event: Event) -> None:
        """Put one event back so the next call to :meth:`next_event` returns it."""
        if self._back is not None:
            raise RuntimeError("an event has already been pushed back")
        log.debug("Back: %r", event)
        self._back = event

    def parse(self) -> Summary:
        """Parse the whole text."""
        title = self.parse_title()
        prefix = self._with_context(
            "There was an error parsing the prefix chapters", self.parse_affix, True
        )
        numbered = self._with_context(
            "There was an error parsing the numbered chapters", self.parse_parts
        )
        suffix = self._with_context(
            "There was an error parsing the suffix chapters", self.parse_affix, False
        )
        return Summary(
            title=title,
            prefix_chapters=prefix,
            numbered_chapters=numbered,
            suffix_chapters=suffix,
        )

    def parse_title(self) -> str | None:
        """Read a leading level-one heading, skipping HTML such as comments."""
        while True:
            event = self.next_event()
            if event is None:
                return None
            if event.is_start("heading", 1):
                log.debug("Found a h1 in the SUMMARY")
                return stringify_events(self._collect_until_end("heading", 1))
            if event.kind is EventKind.HTML:
                continue
            self.push_back(event)
            return None

    def parse_affix(self, is_prefix: bool) -> list[SummaryItem]:
        """Parse the unnumbered chapters before or after the numbered ones."""
        log.debug("Parsing %s items", "prefix" if is_prefix else "suffix")
        items: list[SummaryItem] = []
        while (event := self.next_event()) is not None:
            if event.is_start("list") or event.is_start("heading", 1):
                if is_prefix:
                    self.push_back(event)
                    break
                raise self._parse_error("Suffix chapters cannot be followed by a list")
            if event.is_start("link"):
                items.append(self.parse_link(event.tag.href))
            elif event.kind is EventKind.RULE:
                items.append(Separator())
        return items

    def parse_parts(self) -> list[SummaryItem]:
        """Parse the numbered chapters, which may be split into titled parts."""
        parts: list[SummaryItem] = []
        root_number = SectionNumber()
        self._root_items = 0

        while True:
            event = self.next_event()
            if event is None:
                break
            if event.is_start("paragraph"):
                self.push_back(event)
                break
            if event.is_start("heading", 1):
                log.debug("Found a h1 in the SUMMARY")
                title: str | None = stringify_events(self._collect_until_end("heading", 1))
            else:
                self.push_back(event)
                title = None

            chapters = self._with_context(
                "There was an error parsing the numbered chapters",
                self.parse_numbered,
                root_number,
            )
            if title is not None:
                parts.append(PartTitle(title))
            parts.extend(chapters)

        return parts

    def parse_numbered(self, root_number: SectionNumber | None = None) -> list[SummaryItem]:
        """Parse one part's worth of numbered chapters."""
        root_number = root_number if root_number is not None else SectionNumber()
        items: list[SummaryItem] = []
        first = True

        while (event := self.next_event()) is not None:
            if event.is_start("paragraph"):
                if not first:
                    self.push_back(event)
                    break
            elif event.is_start("heading", 1):
                self.push_back(event)
                break
            elif event.is_start("list"):
                self.push_back(event)
                batch = self._parse_nested_numbered(root_number)
                update_section_numbers(batch, 0, self._root_items)
                self._root_items += len(batch)
                items.extend(batch)
            elif event.kind is EventKind.START:
                log.debug("Skipping contents of %r", event.tag)
                closing = Event(EventKind.END, event.tag)
                while (inner := self.next_event()) is not None and inner != closing:
                    pass
            elif event.kind is EventKind.RULE:
                items.append(Separator())
            first = False

        return items

    def parse_link(self, href: str) -> Link:
        """Finish a link whose start event has just been read."""
        href = href.replace("%20", " ")
        name = stringify_events(self._collect_until_end("link"))
        return Link(name=name, location=href or None)

    def _parse_nested_numbered(self, parent: SectionNumber) -> list[SummaryItem]:
        log.debug("Parsing numbered chapters at level %s", parent)
        items: list[SummaryItem] = []

        while (event := self.next_event()) is not None:
            if event.is_start("item"):
                items.append(self._parse_nested_item(parent, len(items)))
            elif event.is_start("list"):
                if not items:
                    continue
                try:
                    _, last = get_last_link(items)
                except ValueError as exc:
                    raise SummaryParseError(str(exc)) from exc
                last.nested_items = self._parse_nested_numbered(last.number)
            elif event.is_end("list"):
                break

        return items

    def _parse_nested_item(self, parent: SectionNumber, existing: int) -> SummaryItem:
        while True:
            event = self.next_event()
            if event is not None and event.is_start("paragraph"):
                continue
            if event is not None and event.is_start("link"):
                link = self.parse_link(event.tag.href)
                link.number = parent.child(existing + 1)
                log.debug(
                    "Found chapter: %s %s (%s)",
                    link.number,
                    link.name,
                    link.location if link.location is not None else "[draft]",
                )
                return link
            log.warning("Expected a start of a link, actually got %r", event)
            raise self._parse_error(
                "The link items for nested chapters must only contain a hyperlink"
            )

    def _collect_until_end(self, name: str, level: int | None = None) -> list[Event]:
        collected = []
        for event in self._stream:
            if event.is_end(name, level):
                return collected
            collected.append(event)
        log.debug("Reached end of stream without finding the end of %s", name)
        return collected

    def _parse_error(self, message: str) -> SummaryParseError:
        line, column = self.current_location()
        return SummaryParseError(
            f"failed to parse SUMMARY.md line {line}, column {column}: {message}"
        )

    @staticmethod
    def _with_context(context: str, func, *args):
        try:
            return func(*args)
        except SummaryParseError as exc:
            raise SummaryParseError(f"{context}: {exc}") from exc