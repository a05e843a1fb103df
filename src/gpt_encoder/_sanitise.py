"""
Utilities for rendering byte-mapped symbols as displayable strings.
"""

import unicodedata

from ._byte_map import BYTE_DECODER


def _escape_ctrl_chars(s: str) -> str:
    """Replace all Unicode control characters with their escape sequences."""
    cleaned = []
    for c in s:
        # control category codes vary: Cc, Cf, Cn etc.
        # so check via first character
        if unicodedata.category(c)[0] != "C":
            cleaned.append(c)
        else:
            cleaned.append(f"\\u{ord(c):04x}")
    return "".join(cleaned)


def render_bytes(b: bytes) -> str:
    """
    Decode bytes as UTF-8 and escape control characters.

    Invalid UTF-8 sequences are replaced with the Unicode replacement character.
    """
    return _escape_ctrl_chars(b.decode("utf-8", errors="replace"))


def render_symbol(symbol: str) -> str:
    """
    Render a byte-mapped symbol as the text its bytes spell.

    Characters outside the byte map (e.g. special tokens, or a stray space
    separator) are kept as-is.
    """
    if all(c in BYTE_DECODER for c in symbol):
        return render_bytes(bytes(BYTE_DECODER[c] for c in symbol))
    return _escape_ctrl_chars(symbol)
