"""
Incremental extraction of JSON values embedded in arbitrary text.

Scans text that may arrive in separate chunks (log lines, console output,
streamed LLM responses) and passes through exactly the characters that belong
to top-level JSON objects and arrays, discarding everything around them.
"""

import io
import logging
import os
import time
from collections import deque
from collections.abc import Callable
from collections.abc import Iterable
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any
from typing import Protocol

from surfing._utf8_stream import UTF8ChunkDecoder

__version__ = "0.1.0"

log = logging.getLogger(__name__)

type Position = int

# Invoked once per completed span, after its closing character was written
SpanCallback = Callable[[], object] | None

OPENERS = frozenset("{[")
CLOSERS = frozenset("}]")
PAIRED_MARKERS = {"{": "}", "[": "]"}

# Per-scope timings, collected only when SURFING_PROFILE is set at import
PROFILE_HOT_PATHS = __debug__ and "SURFING_PROFILE" in os.environ


@dataclass
class HotPathStats:
    """Accumulated timings of one profiled scope."""

    scope: str
    call_count: int = 0
    total_time_ns: int = 0
    chars_processed: int = 0

    def record(self, duration_ns: int, chars: int = 0) -> None:
        self.call_count += 1
        self.total_time_ns += duration_ns
        self.chars_processed += chars


_hot_path_stats: dict[str, HotPathStats] = {}


if PROFILE_HOT_PATHS:

    class ProfileContext:
        """Times the enclosed block and charges it to a named scope."""

        __slots__ = ("scope", "chars", "_started_ns")

        def __init__(self, scope: str, chars: int = 0) -> None:
            self.scope = scope
            self.chars = chars
            self._started_ns = 0

        def __enter__(self) -> "ProfileContext":
            self._started_ns = time.perf_counter_ns()
            return self

        def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
            elapsed = time.perf_counter_ns() - self._started_ns
            stats = _hot_path_stats.get(self.scope)
            if stats is None:
                stats = _hot_path_stats[self.scope] = HotPathStats(self.scope)
            stats.record(elapsed, self.chars)

else:

    class ProfileContext:  # type: ignore[no-redef]
        """No-op stand-in used when profiling is off."""

        __slots__ = ()

        def __init__(self, scope: str, chars: int = 0) -> None:
            pass

        def __enter__(self) -> "ProfileContext":
            return self

        def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
            pass


def get_hot_path_stats() -> dict[str, HotPathStats]:
    """Returns a snapshot of the collected timings, keyed by scope."""
    return dict(_hot_path_stats)


def clear_hot_path_stats() -> None:
    _hot_path_stats.clear()


class ScanMode(Enum):
    """
    Scan context of a JSONParser.

    IDLE discards input until an opening bracket. The other three modes are
    only reachable while at least one bracket is open.
    """

    IDLE = "idle"
    IN_VALUE = "in_value"
    IN_STRING = "in_string"
    ESCAPED = "escaped"


class Sink(Protocol):
    """Destination for emitted characters; any text stream qualifies."""

    def write(self, s: str, /) -> object: ...


class SurfingError(Exception):
    """Base class for all errors raised by surfing."""


class SinkError(SurfingError):
    """
    Raised when the sink rejects a write.

    The original exception is chained as ``__cause__``. ``pos`` is the parser
    position of the character that could not be written; that character was
    not consumed, so feeding the input again from ``pos`` resumes correctly.
    """

    def __init__(self, msg: str, pos: Position = 0) -> None:
        self.msg = msg
        self.pos = pos
        super().__init__(f"{msg} at position {pos}")


class NoJSONFoundError(SurfingError, ValueError):
    """Raised by one-shot extraction when the input holds no complete span."""

    def __init__(
        self, msg: str = "No complete JSON value found", doc: str = ""
    ) -> None:
        self.msg = msg
        self.doc = doc
        super().__init__(msg)


class IncompleteJSONError(SurfingError):
    """
    Signals that no JSON value has completed yet.

    Not a failure: the parser keeps its state and expects more input.
    """

    def __init__(
        self, msg: str = "Incomplete JSON: parser is still expecting more input"
    ) -> None:
        self.msg = msg
        super().__init__(msg)


class DecodeError(SurfingError, ValueError):
    """
    Raised when the decoder rejects a complete span.

    Holds the rejected span text; the decoder's own exception is chained as
    ``__cause__``.
    """

    def __init__(self, msg: str, span: str = "") -> None:
        self.msg = msg
        self.span = span
        super().__init__(f"{msg}: {span[:80]!r}" if span else msg)


@dataclass(frozen=True)
class ScanConfig:
    """
    Configures boundary scanning with immutable settings.

    strict_brackets switches from an aggregate depth counter to a typed
    bracket stack: a closer that does not match the innermost opener is
    passed through as content and leaves the depth unchanged.
    """

    strict_brackets: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.strict_brackets, bool):
            raise TypeError("strict_brackets must be a boolean")


class JSONParser:
    """
    Boundary scanner for JSON values embedded in text.

    Consumes one fragment at a time and keeps its scan context between calls,
    so a value may be split across any number of fragments. Matched
    characters are written to the sink one by one as soon as they are seen;
    the parser itself buffers nothing. Feeding fragments separately gives the
    same output as feeding their concatenation.

    One parser serves one stream; it returns to IDLE after each value and is
    ready for the next.
    """

    def __init__(self, config: ScanConfig | None = None, **kwargs: Any) -> None:
        if config is None:
            config = ScanConfig(**kwargs)
        elif kwargs:
            raise TypeError("pass either config or keyword options, not both")
        self.config = config
        self._mode = ScanMode.IDLE
        self._depth = 0
        self._closers: list[str] = []
        self._position: Position = 0
        self._spans_completed = 0

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(mode={self._mode.name}, "
            f"depth={self._depth}, position={self._position})"
        )

    @property
    def mode(self) -> ScanMode:
        return self._mode

    @property
    def depth(self) -> int:
        return self._depth

    @property
    def position(self) -> Position:
        """Number of characters consumed so far."""
        return self._position

    @property
    def spans_completed(self) -> int:
        return self._spans_completed

    @property
    def is_in_json(self) -> bool:
        """True while a value has been opened but not yet closed."""
        return self._mode is not ScanMode.IDLE

    def reset(self) -> None:
        """Drops any partial value and returns to IDLE."""
        self._mode = ScanMode.IDLE
        self._depth = 0
        self._closers.clear()
        self._position = 0
        self._spans_completed = 0

    def _emit(self, sink: Sink, char: str) -> None:
        try:
            sink.write(char)
        except Exception as e:
            raise SinkError(
                f"Sink rejected write ({type(e).__name__}: {e})",
                self._position,
            ) from e

    def _close(self, char: str) -> bool:
        """Returns whether char closes the innermost open bracket."""
        if not self.config.strict_brackets:
            return True
        return bool(self._closers) and self._closers[-1] == char

    def feed(
        self,
        fragment: str,
        sink: Sink,
        on_complete: SpanCallback = None,
    ) -> int:
        """
        Scans one fragment, writing matched characters to sink.

        Calls on_complete after the closing character of each value has been
        written. Returns the number of values completed during this call.

        A failing sink write raises SinkError and leaves the parser in the
        state it had before the character that failed.
        """
        if not isinstance(fragment, str):
            raise TypeError(
                f"fragment must be str, not {type(fragment).__name__}"
            )

        completed = 0
        with ProfileContext("feed", len(fragment)):
            for char in fragment:
                mode = self._mode

                if mode is ScanMode.IDLE:
                    if char in OPENERS:
                        self._emit(sink, char)
                        self._mode = ScanMode.IN_VALUE
                        self._depth = 1
                        if self.config.strict_brackets:
                            self._closers.append(PAIRED_MARKERS[char])
                    self._position += 1
                    continue

                self._emit(sink, char)
                self._position += 1

                if mode is ScanMode.IN_STRING:
                    if char == '"':
                        self._mode = ScanMode.IN_VALUE
                    elif char == "\\":
                        self._mode = ScanMode.ESCAPED
                elif mode is ScanMode.ESCAPED:
                    self._mode = ScanMode.IN_STRING
                elif char == '"':
                    self._mode = ScanMode.IN_STRING
                elif char in OPENERS:
                    self._depth += 1
                    if self.config.strict_brackets:
                        self._closers.append(PAIRED_MARKERS[char])
                elif char in CLOSERS and self._close(char):
                    self._depth -= 1
                    if self.config.strict_brackets:
                        self._closers.pop()
                    if self._depth == 0:
                        self._mode = ScanMode.IDLE
                        self._spans_completed += 1
                        completed += 1
                        log.debug(
                            "JSON value %d complete at position %d",
                            self._spans_completed,
                            self._position,
                        )
                        if on_complete is not None:
                            on_complete()

        return completed


class SpanCollector:
    """
    In-memory sink that groups emitted characters into complete spans.

    Pass ``collector.complete`` as the parser's on_complete callback; each
    completed value is then appended to ``spans`` as one string.
    """

    def __init__(self) -> None:
        self._parts: list[str] = []
        self.spans: deque[str] = deque()

    def write(self, s: str) -> int:
        self._parts.append(s)
        return len(s)

    def complete(self) -> None:
        self.spans.append("".join(self._parts))
        self._parts.clear()

    @property
    def partial(self) -> str:
        """Characters of the value currently being collected."""
        return "".join(self._parts)

    def clear(self) -> None:
        self._parts.clear()
        self.spans.clear()


def extract_json_from_stream(
    parser: JSONParser,
    sink: Sink,
    fragment: str,
    on_complete: SpanCallback = None,
) -> int:
    """
    Streams the JSON parts of fragment into sink using the caller's parser.

    Returns the number of values completed by this fragment.
    """
    return parser.feed(fragment, sink, on_complete)


def extract_json_to_string(text: str, **kwargs: Any) -> str:
    """
    Returns every complete JSON value in text, concatenated in order.

    No separator is inserted between consecutive values. Characters of a
    trailing value that never closes are left out.

    Raises NoJSONFoundError when text holds no complete value.
    """
    buffer = io.StringIO()
    end = 0

    def mark_end() -> None:
        nonlocal end
        end = buffer.tell()

    parser = JSONParser(**kwargs)
    if not parser.feed(text, buffer, mark_end):
        raise NoJSONFoundError(doc=text)

    return buffer.getvalue()[:end]


def extract_json_spans(text: str, **kwargs: Any) -> list[str]:
    """Returns each complete JSON value in text separately, in order."""
    collector = SpanCollector()
    JSONParser(**kwargs).feed(text, collector, collector.complete)
    return list(collector.spans)


def iter_json_spans(
    chunks: Iterable[str | bytes],
    *,
    encoding: str = "utf-8",
    **kwargs: Any,
) -> Iterator[str]:
    """
    Yields JSON values from a chunked stream as soon as each one closes.

    Byte chunks are decoded incrementally, so a multi-byte character may be
    split across byte chunks. A text chunk that arrives while a character is
    still incomplete raises UnicodeDecodeError.
    """
    parser = JSONParser(**kwargs)
    collector = SpanCollector()
    decoder: UTF8ChunkDecoder | None = None

    for chunk in chunks:
        if isinstance(chunk, bytes | bytearray | memoryview):
            if decoder is None:
                decoder = UTF8ChunkDecoder(encoding)
            chunk = decoder.decode(chunk)
        elif decoder is not None and decoder.pending:
            # Held-back bytes precede this chunk in the stream
            parser.feed(decoder.flush(), collector, collector.complete)
        parser.feed(chunk, collector, collector.complete)
        while collector.spans:
            yield collector.spans.popleft()

    if decoder is not None:
        parser.feed(decoder.flush(), collector, collector.complete)
        while collector.spans:
            yield collector.spans.popleft()


from surfing.typed import Decoder  # noqa: E402
from surfing.typed import StreamingDeserializer  # noqa: E402
from surfing.typed import decode_from_mixed_text  # noqa: E402
from surfing.typed import decode_with_existing_parser  # noqa: E402
from surfing.typed import iter_decoded  # noqa: E402
from surfing.typed import resolve_decoder  # noqa: E402

__all__ = [
    "DecodeError",
    "Decoder",
    "HotPathStats",
    "IncompleteJSONError",
    "JSONParser",
    "NoJSONFoundError",
    "ScanConfig",
    "ScanMode",
    "Sink",
    "SinkError",
    "SpanCollector",
    "StreamingDeserializer",
    "SurfingError",
    "UTF8ChunkDecoder",
    "clear_hot_path_stats",
    "decode_from_mixed_text",
    "decode_with_existing_parser",
    "extract_json_from_stream",
    "extract_json_spans",
    "extract_json_to_string",
    "get_hot_path_stats",
    "iter_decoded",
    "iter_json_spans",
    "resolve_decoder",
]
