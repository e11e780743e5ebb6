"""Line-oriented text chunker with character overlap.

Lines are packed greedily into chunks of at most ``max_chars`` characters.
When a chunk is flushed, its trailing ``overlap`` characters seed the next
one. A single line longer than ``max_chars`` is hard-split into exact
``max_chars`` slices which are emitted verbatim: untrimmed and without
overlap.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_LINE_ENDINGS = re.compile(r"\r\n?")


@dataclass(frozen=True)
class ChunkOptions:
    """Chunk size and overlap, both in characters."""

    max_chars: int = 1200
    overlap: int = 200

    def __post_init__(self) -> None:
        if self.max_chars < 1:
            raise ValueError("max_chars must be >= 1")
        if self.overlap < 0:
            raise ValueError("overlap must be >= 0")


def chunk_text(text: str | None, options: ChunkOptions | None = None) -> list[str]:
    """Split *text* into ordered, overlap-linked chunks.

    Args:
        text: Source text. ``None`` or empty yields an empty list.
        options: Chunk size / overlap; defaults to 1200 / 200 characters.

    Returns:
        Chunks in source order. Same input always gives the same output.
    """
    opts = options or ChunkOptions()
    if not text:
        return []

    max_chars = opts.max_chars
    chunks: list[str] = []
    current = ""

    for line in _LINE_ENDINGS.sub("\n", text).split("\n"):
        if len(line) > max_chars:
            flushed = current.strip()
            if flushed:
                chunks.append(flushed)
            current = ""
            chunks.extend(line[i : i + max_chars] for i in range(0, len(line), max_chars))
            continue

        if len(current) + 1 + len(line) > max_chars:
            flushed = current.strip()
            if flushed:
                chunks.append(flushed)
            if opts.overlap > 0 and flushed:
                current = flushed[-opts.overlap :]
            else:
                current = ""

        current = f"{current}\n{line}" if current else line

    tail = current.strip()
    if tail:
        chunks.append(tail)
    return chunks
