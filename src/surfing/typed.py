"""
Typed decoding on top of the boundary scanner.

Collects the characters of each JSON value found in a stream and hands the
complete value to a decoder. The decoder is any callable taking the JSON text;
by default a pydantic ``TypeAdapter`` for the requested target type is used,
or ``orjson.loads`` when no target is given.
"""

import logging
from collections.abc import Callable
from collections.abc import Iterable
from collections.abc import Iterator
from functools import lru_cache
from typing import Any

import orjson
from pydantic import TypeAdapter

from surfing import DecodeError
from surfing import IncompleteJSONError
from surfing import JSONParser
from surfing import ProfileContext
from surfing import ScanConfig
from surfing import SpanCollector
from surfing import extract_json_to_string
from surfing import iter_json_spans

log = logging.getLogger(__name__)

type Decoder[T] = Callable[[str], T]


@lru_cache(maxsize=128)
def _type_adapter(target: Any) -> TypeAdapter[Any]:
    return TypeAdapter(target)


def resolve_decoder[T](
    target: type[T] | None = None, decoder: Decoder[T] | None = None
) -> Decoder[Any]:
    """
    Picks the decoder for a target type.

    An explicit decoder wins; a target type is validated through pydantic;
    with neither, values decode untyped via orjson.
    """
    if decoder is not None:
        if target is not None:
            raise TypeError("pass either target or decoder, not both")
        if not callable(decoder):
            raise TypeError("decoder must be callable")
        return decoder
    if target is None:
        return orjson.loads
    return _type_adapter(target).validate_json


def _decode[T](decoder: Decoder[T], span: str) -> T:
    with ProfileContext("decode", len(span)):
        try:
            return decoder(span)
        except (ValueError, TypeError) as e:
            log.debug("Decoder rejected %d-character value: %s", len(span), e)
            raise DecodeError(
                f"Could not decode JSON value ({type(e).__name__})", span
            ) from e


class StreamingDeserializer[T]:
    """
    Chunk-in, value-out decoder for JSON values embedded in a text stream.

    Characters of the value in progress are accumulated until it closes;
    closed values wait in a queue and are decoded one per call, oldest first.
    A value that fails to decode is dropped and reported as DecodeError, and
    the stream carries on with the next one.
    """

    def __init__(
        self,
        target: type[T] | None = None,
        *,
        decoder: Decoder[T] | None = None,
        parser_config: ScanConfig | None = None,
    ) -> None:
        self.target = target
        self._decoder = resolve_decoder(target, decoder)
        self._parser = JSONParser(parser_config)
        self._collector = SpanCollector()

    @property
    def parser(self) -> JSONParser:
        return self._parser

    @property
    def is_in_json(self) -> bool:
        return self._parser.is_in_json

    @property
    def accumulated_json(self) -> str:
        """Text collected so far for the value that has not closed yet."""
        return self._collector.partial

    @property
    def pending(self) -> int:
        """Number of closed values not yet decoded."""
        return len(self._collector.spans)

    def feed(self, fragment: str) -> int:
        """Scans fragment and queues the values it closes."""
        return self._parser.feed(
            fragment, self._collector, self._collector.complete
        )

    def process_chunk(self, fragment: str) -> T | None:
        """
        Feeds one chunk and returns the oldest closed value, decoded.

        Returns None when no value is ready yet. Further values closed by the
        same chunk are returned by later calls.
        """
        self.feed(fragment)
        if not self._collector.spans:
            return None
        return _decode(self._decoder, self._collector.spans.popleft())

    def drain(self) -> Iterator[T]:
        """Decodes queued values in order until the queue is empty."""
        while self._collector.spans:
            yield _decode(self._decoder, self._collector.spans.popleft())

    def reset(self) -> None:
        """Forgets the partial value and every queued value."""
        self._parser.reset()
        self._collector.clear()

    def finalize(self) -> T | None:
        """
        Marks the end of the stream.

        Returns the next queued value, or None when nothing is left. A value
        left open at end of stream raises DecodeError and resets the
        deserializer.
        """
        if self._collector.spans:
            return _decode(self._decoder, self._collector.spans.popleft())

        partial = self._collector.partial
        if not partial:
            return None

        self.reset()
        raise DecodeError("Unterminated JSON value at end of stream", partial)


def decode_from_mixed_text[T](
    text: str,
    target: type[T] | None = None,
    *,
    decoder: Decoder[T] | None = None,
) -> T:
    """
    Extracts the JSON in text and decodes it in one step.

    Raises NoJSONFoundError when text holds no complete value and DecodeError
    when the decoder rejects it. Several values in one text are concatenated
    before decoding and therefore fail.
    """
    decode = resolve_decoder(target, decoder)
    return _decode(decode, extract_json_to_string(text))


def decode_with_existing_parser[T](
    parser: JSONParser,
    fragment: str,
    target: type[T] | None = None,
    *,
    decoder: Decoder[T] | None = None,
) -> T:
    """
    Feeds fragment to the caller's parser and decodes the first value it closes.

    Only characters emitted during this call are decoded, so a value must
    start and end within the same fragment; use StreamingDeserializer for
    values split across chunks. Values closed later in the fragment are
    scanned but not decoded.

    Raises IncompleteJSONError when no value closed during this call.
    """
    decode = resolve_decoder(target, decoder)
    collector = SpanCollector()
    parser.feed(fragment, collector, collector.complete)

    if not collector.spans:
        raise IncompleteJSONError()

    return _decode(decode, collector.spans[0])


def iter_decoded[T](
    chunks: Iterable[str | bytes],
    target: type[T] | None = None,
    *,
    decoder: Decoder[T] | None = None,
    **kwargs: Any,
) -> Iterator[T]:
    """Yields each JSON value of a chunked stream, decoded, as it closes."""
    decode = resolve_decoder(target, decoder)
    for span in iter_json_spans(chunks, **kwargs):
        yield _decode(decode, span)
