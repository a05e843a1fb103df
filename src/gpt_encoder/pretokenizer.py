"""Regex-driven splitting of text into pretokens."""

import logging

import regex as re

from .errors import PatternError
from .pattern import TokenPattern

log = logging.getLogger(__name__)


class Pretokenizer:
    """
    Split text into ordered raw substrings using a split pattern.

    Every alternative of the built-in patterns can match any character class
    (letters, numbers, other, whitespace), so the matched spans always cover
    the whole input.
    """

    def __init__(self, pattern: str | None = None) -> None:
        """Initialize with a provided or default (GPT-2) split pattern."""
        self.pat: str = TokenPattern.GPT2.value if pattern is None else pattern
        self.compiled_pat: re.Pattern[str] = _compile_pattern(self.pat)

    def split(self, text: str) -> list[str]:
        """
        Return the pretokens of ``text`` in left-to-right order.

        Empty matches, which custom patterns such as ``[a-z]*`` can produce,
        are dropped.
        """
        return [m.group(0) for m in self.compiled_pat.finditer(text) if m.group(0)]

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(pattern={self.pat!r})"


def _compile_pattern(pattern: str) -> re.Pattern:
    """
    Compile and validate a regex pattern.

    :param pattern: Regex pattern string to compile.
    :return: Compiled regex pattern.
    :raises PatternError: If pattern is invalid.
    """
    try:
        return re.compile(pattern)
    except re.error as e:
        raise PatternError("invalid regex pattern", pattern=pattern, regex_err=e) from e
