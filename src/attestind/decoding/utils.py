"""Decoding utilities: strict ABI word access and head/tail readers.

All readers raise `ValueError` on malformed input; the call and payload
decoders translate that into their own skip errors.
"""

from __future__ import annotations

WORD = 32


def word_at(data: bytes, i: int, *, base: int = 0) -> bytes:
    """Return the i-th 32-byte ABI word after `base` (must be in range)."""
    start = base + WORD * i
    end = start + WORD
    if start < 0 or end > len(data):
        raise ValueError(f"word {i} at offset {start} out of range (len={len(data)})")
    return data[start:end]


def padded_len(n: int) -> int:
    """Length `n` rounded up to a whole number of words."""
    return (n + WORD - 1) // WORD * WORD


def parse_uint(word: bytes, bits: int = 256) -> int:
    """Parse an unsigned integer word; reject values wider than `bits`."""
    v = int.from_bytes(word, "big", signed=False)
    if v >> bits:
        raise ValueError(f"value does not fit in uint{bits}")
    return v


def parse_bool(word: bytes) -> bool:
    """Parse a bool word (any nonzero value is true)."""
    return any(word)


def parse_address(word: bytes) -> bytes:
    """Return the low 20 bytes of an address word; upper 12 must be zero."""
    if any(word[:12]):
        raise ValueError("address word has non-zero padding")
    return word[12:]


def read_offset(data: bytes, i: int, *, base: int = 0) -> int:
    """Read a head offset word and resolve it to an absolute position."""
    rel = parse_uint(word_at(data, i, base=base), 64)
    pos = base + rel
    if pos + WORD > len(data):
        raise ValueError(f"offset {rel} points past end of data")
    return pos


def read_bytes(data: bytes, pos: int) -> bytes:
    """Read a length-prefixed byte string whose length word sits at `pos`."""
    n = parse_uint(word_at(data, 0, base=pos), 64)
    start = pos + WORD
    # the tail is padded to a whole number of words
    if start + padded_len(n) > len(data):
        raise ValueError(f"tail at {pos} shorter than declared length {n}")
    return data[start : start + n]


def read_bytes_array(data: bytes, pos: int) -> tuple[bytes, ...]:
    """Read a `bytes[]` whose length word sits at `pos`."""
    count = parse_uint(word_at(data, 0, base=pos), 64)
    base = pos + WORD
    if base + WORD * count > len(data):
        raise ValueError(f"bytes[] head at {pos} shorter than {count} elements")
    return tuple(read_bytes(data, read_offset(data, k, base=base)) for k in range(count))
