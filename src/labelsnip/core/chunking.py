from __future__ import annotations

DEFAULT_MAX_CHUNK_CHARS = 2000


def split_text(text: str, max_chars: int = DEFAULT_MAX_CHUNK_CHARS) -> list[str]:
    """
    Split text into space-joined runs of whole words.
    max_chars is a character budget standing in for a token budget; a single
    word longer than it still gets a chunk of its own.
    """
    if max_chars < 1:
        raise ValueError(f"max_chars must be positive, got {max_chars}")

    chunks = []
    buf: list[str] = []
    size = 0

    for word in text.split():
        # +1 for the joining space
        if buf and size + 1 + len(word) > max_chars:
            chunks.append(" ".join(buf))
            buf = []
            size = 0
        size += len(word) if not buf else 1 + len(word)
        buf.append(word)

    if buf:
        chunks.append(" ".join(buf))

    return chunks
