"""Event sources for the indexing pipeline.

This module turns an origin (in-memory list, NDJSON file, or NDJSON
standard input) into a lazy, ordered sequence of ``(event, index)``
pairs. The index is the origin position, so resuming at ``start``
lines up with the same positions on every run.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import IO, Callable, Iterable, Iterator, Union

from core.constants import PARSE_WARNING_TEMPLATE
from core.errors import EventParseError, IndexerSourceError
from core.types import Event
from ingest.event_payload import parse_event

ParseErrorHandler = Callable[[str, EventParseError], None]
NdjsonLine = Union[str, bytes]
NdjsonSource = Union[str, os.PathLike, IO]


def events_from_list(events: Iterable[Event], start: int = 0) -> Iterator[tuple[Event, int]]:
    """Yield pre-parsed events with their positions.

    Args:
        events: Ordered events.
        start: Zero-based position of the first event to yield.

    Returns:
        Generator of ``(event, index)`` pairs.
    """
    for index, event in enumerate(events):
        if index >= start:
            yield event, index


def events_from_lines(
    lines: Iterable[NdjsonLine],
    start: int = 0,
    warn_on_unparseable_items: bool = False,
    on_parse_error: ParseErrorHandler | None = None,
) -> Iterator[tuple[Event, int]]:
    """Parse NDJSON lines into events, dropping unparseable ones.

    Lines before ``start`` are counted but never parsed. Byte lines are
    decoded one at a time, so a line that is not UTF-8 is dropped like
    any other malformed item. Each dropped line produces exactly one
    diagnostic when warnings are enabled.

    Args:
        lines: Text or byte lines, e.g. an open file.
        start: Zero-based position of the first line to parse.
        warn_on_unparseable_items: Report dropped lines.
        on_parse_error: Diagnostic channel, defaults to standard error.

    Returns:
        Generator of ``(event, index)`` pairs.

    Raises:
        IndexerSourceError: If reading from the origin fails.
    """
    report = on_parse_error or _print_parse_warning
    for index, line in enumerate(_read_lines(lines)):
        if index < start:
            continue
        try:
            event = parse_event(_decode_line(line))
        except EventParseError as error:
            if warn_on_unparseable_items:
                report(error.raw_text, error)
            continue
        yield event, index


def events_from_ndjson_file(
    source: NdjsonSource,
    start: int = 0,
    warn_on_unparseable_items: bool = False,
    on_parse_error: ParseErrorHandler | None = None,
) -> Iterator[tuple[Event, int]]:
    """Stream events from an NDJSON file.

    The file is opened in binary mode on first pull and closed once the
    generator is exhausted or closed. An already-open handle, text or
    binary, is owned by the generator and closed the same way.

    Args:
        source: File path or open handle.
        start: Zero-based line position of the first event to yield.
        warn_on_unparseable_items: Report dropped lines.
        on_parse_error: Diagnostic channel, defaults to standard error.

    Returns:
        Generator of ``(event, index)`` pairs.

    Raises:
        IndexerSourceError: If the file cannot be opened or read.
    """
    handle = _open_source(source)
    with handle:
        yield from events_from_lines(handle, start, warn_on_unparseable_items, on_parse_error)


def events_from_ndjson_stdin(
    start: int = 0,
    warn_on_unparseable_items: bool = False,
    on_parse_error: ParseErrorHandler | None = None,
) -> Iterator[tuple[Event, int]]:
    """Stream events from standard input until it is closed.

    Standard input belongs to the process and is left open. Its byte
    buffer is read when the stream exposes one.
    """
    stream = getattr(sys.stdin, "buffer", sys.stdin)
    return events_from_lines(stream, start, warn_on_unparseable_items, on_parse_error)


def _read_lines(lines: Iterable[NdjsonLine]) -> Iterator[NdjsonLine]:
    """Iterate lines, mapping read failures to source errors."""
    iterator = iter(lines)
    while True:
        try:
            line = next(iterator)
        except StopIteration:
            return
        except (OSError, UnicodeDecodeError) as error:
            raise IndexerSourceError(
                f"Failed to read event input: {error}. "
                "Check the input stream and retry from the last applied index."
            ) from error
        yield line


def _open_source(source: NdjsonSource) -> IO:
    """Open a path for reading or pass an open handle through."""
    if not isinstance(source, (str, os.PathLike)):
        return source
    path = Path(source).expanduser()
    try:
        return path.open("rb")
    except OSError as error:
        raise IndexerSourceError(
            f"Failed to open event file at {path}: {error.strerror or error}. "
            "Provide a readable NDJSON file."
        ) from error


def _print_parse_warning(text: str, error: EventParseError) -> None:
    """Write one warning line for a dropped item to standard error."""
    print(PARSE_WARNING_TEMPLATE.format(error=error, data=text), file=sys.stderr)


def _decode_line(line: NdjsonLine) -> str:
    """Return one line as text without its terminator.

    Raises:
        EventParseError: If a byte line is not valid UTF-8.
    """
    if isinstance(line, bytes):
        try:
            line = line.decode("utf-8")
        except UnicodeDecodeError as error:
            raw_text = line.decode("utf-8", errors="replace").rstrip("\r\n")
            raise EventParseError(raw_text, f"invalid UTF-8: {error}") from error
    return line.rstrip("\r\n")
