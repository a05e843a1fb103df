"""Text to token-id encoder for GPT-style byte-level BPE vocabularies."""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from math import ceil
from functools import lru_cache
from typing import Final, Literal, TypeAlias

import regex as re

from ._bpe import bpe
from ._byte_map import byte_map
from .cache import EncodeCache
from .errors import ModelLoadError, SpecialTokenError, VocabularyError
from .parallel import ParallelMode, ParallelStrategy
from .pretokenizer import Pretokenizer
from .types import BpeRanks, TokenId, Vocab
from .vocab import VocabEncoder

ENDOFTEXT: Final[str] = "<|endoftext|>"

AllowedSpecial: TypeAlias = Literal["all"] | set[str] | frozenset[str]

log = logging.getLogger(__name__)


class Encoder:
    """
    Encode text into the token ids of a byte-level BPE vocabulary.

    Owns the rank table, the vocabulary and a per-instance merge cache. The
    tables are read-only after construction; the cache grows for the life
    of the instance. One encoder can be shared between threads: cache writes
    are locked and every writer of a key agrees on its value.

    .. code-block:: python

        enc = Encoder(vocab, bpe_ranks)
        ids = enc.encode("Hello world")
    """

    def __init__(
        self,
        vocab: Vocab,
        bpe_ranks: BpeRanks,
        *,
        pattern: str | None = None,
        special_tokens: list[str] | None = None,
    ) -> None:
        """
        Initialize encoder from in-memory tables.

        :param vocab: Symbol string -> id mapping.
        :param bpe_ranks: Symbol pair -> merge rank mapping.
        :param pattern: Split regex; defaults to the GPT-2 pattern.
        :param special_tokens: Special token strings to register. Defaults to
            ``<|endoftext|>`` when the vocabulary has it.
        :raises ModelLoadError: If ranks are not unique and below the table size.
        :raises VocabularyError: If a special token is missing from the vocabulary.
        :raises PatternError: If ``pattern`` is not a valid regex.
        """
        _check_ranks(bpe_ranks)
        self.bpe_ranks: BpeRanks = dict(bpe_ranks)
        self.vocab_encoder = VocabEncoder(vocab)
        self.pretokenizer = Pretokenizer(pattern)
        self.cache = EncodeCache()

        if special_tokens is None:
            special_tokens = [ENDOFTEXT] if ENDOFTEXT in self.vocab_encoder else []
        self.special_toks: dict[str, TokenId] = {}
        for seq in special_tokens:
            if seq not in self.vocab_encoder:
                raise VocabularyError(
                    "special token not found in vocabulary", invalid_symbol=seq
                )
            self.special_toks[seq] = self.vocab_encoder.vocab[seq]

        log.info(
            f"encoder ready: {len(self.bpe_ranks)} merge rules, "
            f"{len(self.vocab_encoder)} vocab entries, "
            f"{len(self.special_toks)} special tokens"
        )

    def bpe(self, token: str) -> str:
        """Return the merged string for a byte-mapped token, using the cache."""
        return self.cache.lookup_or_compute(token, self._merge)

    def _merge(self, token: str) -> str:
        return bpe(token, self.bpe_ranks)

    def _encode_ordinary(self, text: str) -> list[TokenId]:
        """Encode ``text`` through split, byte map, BPE and vocab lookup."""
        ids: list[TokenId] = []
        for token in self.pretokenizer.split(text):
            merged = self.bpe(byte_map(token))
            ids.extend(self.vocab_encoder.ids_for(merged))
        return ids

    def encode(
        self,
        text: str,
        allowed_special: AllowedSpecial = frozenset(),
    ) -> list[TokenId]:
        """
        Encode text into a sequence of token ids.

        By default special token strings get no special treatment and are
        encoded like any other text. Tokens named in ``allowed_special`` (or
        every registered one for ``"all"``) map straight to their ids and
        the text between them is encoded normally.

        :param text: Text to encode.
        :param allowed_special: Registered special tokens to emit atomically.
        :returns: Token ids in text order.
        :raises VocabularyError: If BPE yields a symbol missing from the vocabulary.
        :raises SpecialTokenError: If ``allowed_special`` names an unregistered token.
        """
        special_toks = self._resolve_special(allowed_special)
        if not special_toks:
            return self._encode_ordinary(text)

        ids: list[TokenId] = []
        for chunk in _special_pattern(frozenset(special_toks)).split(text):
            if chunk in special_toks:
                ids.append(special_toks[chunk])
            elif chunk:
                ids.extend(self._encode_ordinary(chunk))
        return ids

    def _resolve_special(self, allowed_special: AllowedSpecial) -> dict[str, TokenId]:
        """Map the requested special tokens to their registered ids."""
        if allowed_special == "all":
            return self.special_toks
        unknown = set(allowed_special) - self.special_toks.keys()
        if unknown:
            raise SpecialTokenError("special tokens not registered", found_tokens=unknown)
        return {seq: self.special_toks[seq] for seq in allowed_special}

    def encode_batch(
        self,
        texts: list[str],
        allowed_special: AllowedSpecial = frozenset(),
        num_workers: int | None = None,
        parallel_mode: ParallelStrategy | ParallelMode = "auto",
    ) -> list[list[TokenId]]:
        """
        Encode many texts, optionally on a thread pool sharing this encoder.

        ``off`` encodes serially. ``batch`` spreads groups of texts over
        ``num_workers`` threads. ``auto`` uses ``batch`` unless there is only
        one text or one worker.

        :param texts: Text inputs to encode.
        :param allowed_special: Special tokens to emit atomically, as in :meth:`encode`.
        :param num_workers: Worker count; defaults to the CPU count.
        :param parallel_mode: Parallelization policy.
        :returns: Encoded id sequences in input order.
        :raises ParallelModeError: If ``parallel_mode`` is unknown.
        """
        mode = ParallelMode.get(parallel_mode)
        if not texts:
            return []

        if num_workers is None:
            workers = os.cpu_count() or 1
        else:
            workers = max(1, num_workers)  # "0" interpreted as 1 worker

        if mode is ParallelMode.AUTO:
            mode = ParallelMode.OFF if workers == 1 or len(texts) == 1 else ParallelMode.BATCH

        if mode is ParallelMode.OFF:
            return [self.encode(text, allowed_special) for text in texts]

        # group texts to reduce task-scheduling overhead for many small inputs
        target_tasks = min(len(texts), workers * 2)
        group_size = max(1, ceil(len(texts) / target_tasks))
        text_groups = [
            texts[idx : idx + group_size] for idx in range(0, len(texts), group_size)
        ]

        def encode_group(group: list[str]) -> list[list[TokenId]]:
            return [self.encode(text, allowed_special) for text in group]

        with ThreadPoolExecutor(max_workers=workers) as pool:
            encoded_groups = list(pool.map(encode_group, text_groups))
        return [encoded for group in encoded_groups for encoded in group]

    def vocab_size(self) -> int:
        """Return the number of entries in the vocabulary."""
        return len(self.vocab_encoder)

    def cache_size(self) -> int:
        """Return the number of memoized tokens."""
        return len(self.cache)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(merges={len(self.bpe_ranks)}, "
            f"vocab={self.vocab_size()}, cached={self.cache_size()})"
        )


def _check_ranks(bpe_ranks: BpeRanks) -> None:
    """Ensure ranks are distinct and below the table size, which is the no-merge sentinel."""
    size = len(bpe_ranks)
    ranks = set(bpe_ranks.values())
    if len(ranks) != size or any(r < 0 or r >= size for r in ranks):
        raise ModelLoadError("merge ranks must be unique and in [0, table size)")


@lru_cache(maxsize=32)
def _special_pattern(special_toks: frozenset[str]) -> re.Pattern:
    """Compile a splitter that keeps the given special tokens as separate chunks."""
    # longest first so overlapping special tokens match greedily
    esc_special_toks = [
        re.escape(seq) for seq in sorted(special_toks, key=len, reverse=True)
    ]
    # capturing group keeps the special tokens in the split result
    return re.compile("(" + "|".join(esc_special_toks) + ")")
