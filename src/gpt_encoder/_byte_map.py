"""
Reversible mapping between raw bytes and printable unicode characters.

BPE merges operate on strings, so every byte 0..255 needs a one-character
stand-in. Bytes that are already printable map to themselves; the remaining
68 bytes (control chars, space, a few latin-1 gaps) are shifted up to code
points 256 and above, in ascending byte order.
"""

from functools import lru_cache
from typing import Final


# printable byte ranges that keep their own code point
_PRINTABLE_RANGES: Final[tuple[range, ...]] = (
    range(ord("!"), ord("~") + 1),
    range(ord("\xa1"), ord("\xac") + 1),
    range(ord("\xae"), ord("\xff") + 1),
)


@lru_cache(maxsize=1)
def bytes_to_unicode() -> dict[int, str]:
    """Return the byte value -> single character mapping, built once."""
    printable = {b for r in _PRINTABLE_RANGES for b in r}

    mapping: dict[int, str] = {}
    n = 0
    for b in range(256):
        if b in printable:
            mapping[b] = chr(b)
        else:
            mapping[b] = chr(256 + n)
            n += 1
    return mapping


BYTE_ENCODER: Final[dict[int, str]] = bytes_to_unicode()
BYTE_DECODER: Final[dict[str, int]] = {c: b for b, c in BYTE_ENCODER.items()}


def byte_map(token: str) -> str:
    """
    Translate the UTF-8 bytes of ``token`` into their mapped characters.

    Lone surrogates (e.g. from ``surrogateescape`` decoding of binary input)
    are encoded as their 3-byte UTF-8 form instead of failing.
    """
    return "".join(BYTE_ENCODER[b] for b in token.encode("utf-8", errors="surrogatepass"))
