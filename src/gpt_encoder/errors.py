"""Custom exception hierarchy for gpt_encoder errors."""

import regex as re

from ._sanitise import render_symbol


class EncoderError(Exception):
    """Base exception for all gpt_encoder errors."""


class ModelLoadError(EncoderError):
    """Raised when a merge-rule or vocabulary resource cannot be loaded."""

    def __init__(
        self,
        message: str,
        *,
        model_path: str | None = None,
        line_no: int | None = None,
    ) -> None:
        extra = " "
        if model_path:
            extra += f"(path: {model_path}) "
        if line_no is not None:
            extra += f"(line: {line_no}) "
        super().__init__(message + extra)
        self.model_path = model_path
        self.line_no = line_no


class VocabularyError(EncoderError):
    """Raised when a merged symbol has no id in the vocabulary."""

    def __init__(self, message: str, *, invalid_symbol: str | None = None) -> None:
        """Initialize with an optional symbol that gets appended to the message."""
        extra = " "
        # control chars in byte-mapped symbols would garble the message
        if invalid_symbol is not None:
            extra += f"(invalid symbol: {render_symbol(invalid_symbol)!r}) "
        super().__init__(message + extra)
        self.invalid_symbol = invalid_symbol


class PatternError(EncoderError):
    """Raised when compiling and/or validating regex patterns."""

    def __init__(
        self,
        message: str,
        *,
        pattern: str | None = None,
        regex_err: re.error | None = None,
    ) -> None:
        """
        Initialize PatternError with pattern details.

        Args:
            message: Error message.
            pattern: The regex pattern that failed.
            regex_err: The underlying regex error from the regex library.
        """
        extra = " "
        if pattern:
            extra += f"(pattern: {pattern!r}) "
        if regex_err:
            extra += f"(reason: {regex_err}) "
        super().__init__(message + extra)
        self.pattern = pattern
        self.regex_err = regex_err


class SpecialTokenError(EncoderError):
    """Raised when special token handling fails."""

    def __init__(self, message: str, *, found_tokens: set[str] | None = None) -> None:
        """Initialize with optional found_tokens that get appended to the message."""
        if found_tokens:
            message = f"{message} (found: {', '.join(sorted(found_tokens))})"
        super().__init__(message)
        self.found_tokens = found_tokens


class ParallelModeError(EncoderError):
    """Raised when a batch parallel mode name is unknown."""

    def __init__(
        self,
        message: str,
        *,
        invalid_name: str | None = None,
        available_modes: list[str] | None = None,
    ) -> None:
        extra = " "
        if invalid_name:
            extra += f"(available: {available_modes}) (got {invalid_name}) "
        super().__init__(message + extra)
        self.invalid_name = invalid_name
        self.available_modes = available_modes
