"""Incremental decoding of byte chunks that may split multi-byte characters."""

from __future__ import annotations

import codecs
from typing import Final


class UTF8ChunkDecoder:
    """Turns a sequence of byte chunks into text chunks.

    Network reads cut the stream at arbitrary byte offsets, which may fall in
    the middle of a multi-byte character. Trailing bytes of an unfinished
    sequence are held back and prefixed to the next chunk, so every returned
    string contains whole characters only.
    """

    def __init__(self, encoding: str = "utf-8", errors: str = "strict") -> None:
        """Initialize the decoder.

        Args:
            encoding: Codec used for the byte stream (default UTF-8)
            errors: Codec error handler, as for ``bytes.decode``
        """
        self.encoding: Final = codecs.lookup(encoding).name
        self._decoder = codecs.getincrementaldecoder(self.encoding)(errors)
        self.bytes_consumed = 0

    @property
    def pending(self) -> int:
        """Number of bytes held back waiting for the rest of a character."""
        buffered, _ = self._decoder.getstate()
        return len(buffered)

    def decode(self, chunk: bytes | bytearray | memoryview) -> str:
        """Decode one chunk.

        Args:
            chunk: Next slice of the byte stream

        Returns:
            Text of every character completed by this chunk

        Raises:
            UnicodeDecodeError: If the chunk contains an invalid sequence
        """
        data = bytes(chunk)
        self.bytes_consumed += len(data)
        return self._decoder.decode(data)

    def flush(self) -> str:
        """Signal end of stream.

        Raises:
            UnicodeDecodeError: If the stream ends inside a character
        """
        text = self._decoder.decode(b"", final=True)
        self._decoder.reset()
        return text

    def reset(self) -> None:
        """Discard held-back bytes."""
        self._decoder.reset()
        self.bytes_consumed = 0
