"""Factory functions for creating encoders and the process-wide default."""

import logging
import os
import threading
from pathlib import Path
from typing import Final

from .encoder import Encoder
from .errors import ModelLoadError
from .loader import load_bpe_ranks, load_vocab

BPE_PATH_ENV: Final[str] = "GPT_ENCODER_BPE_PATH"
VOCAB_PATH_ENV: Final[str] = "GPT_ENCODER_VOCAB_PATH"

log = logging.getLogger(__name__)

_default: Encoder | None = None
_default_lock = threading.Lock()


def from_files(
    bpe_path: str | Path,
    vocab_path: str | Path,
    *,
    pattern: str | None = None,
    special_tokens: list[str] | None = None,
) -> Encoder:
    """
    Load an encoder from a merge-rule file and a vocabulary file.

    :param bpe_path: Path to the ``vocab.bpe`` merge rules.
    :param vocab_path: Path to the ``encoder.json`` vocabulary.
    :param pattern: Optional split regex; defaults to the GPT-2 pattern.
    :param special_tokens: Optional special tokens to register.
    :return: Ready-to-use encoder.
    :raises ModelLoadError: If either file is missing, unreadable or malformed.

    .. code-block:: python

        enc = from_files("gpt2/vocab.bpe", "gpt2/encoder.json")
        ids = enc.encode("Hello world")
    """
    bpe_ranks = load_bpe_ranks(bpe_path)
    vocab = load_vocab(vocab_path)
    return Encoder(vocab, bpe_ranks, pattern=pattern, special_tokens=special_tokens)


def get_encoder() -> Encoder:
    """
    Return the process-wide default encoder, loading it on first use.

    The default is built from the files named by ``GPT_ENCODER_BPE_PATH``
    and ``GPT_ENCODER_VOCAB_PATH`` unless one was installed with
    :func:`set_default_encoder`. Prefer passing an explicit :class:`Encoder`
    where possible.

    :raises ModelLoadError: If no default is installed and the variables are unset.
    """
    global _default
    if _default is not None:
        return _default

    with _default_lock:
        if _default is None:
            bpe_path = os.environ.get(BPE_PATH_ENV, "").strip()
            vocab_path = os.environ.get(VOCAB_PATH_ENV, "").strip()
            if not bpe_path or not vocab_path:
                raise ModelLoadError(
                    f"no default encoder: set {BPE_PATH_ENV} and {VOCAB_PATH_ENV}"
                )
            log.info("initializing default encoder from environment")
            _default = from_files(bpe_path, vocab_path)
        return _default


def set_default_encoder(encoder: Encoder | None) -> None:
    """Install ``encoder`` as the default, or reset it with ``None``."""
    global _default
    with _default_lock:
        _default = encoder
