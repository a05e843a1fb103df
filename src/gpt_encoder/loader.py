"""
Loaders for the merge-rule and vocabulary resources.

Merge-rule files (``vocab.bpe``) hold one ``first second`` pair per line
after a ``#version`` header; the line position is the merge rank.
Vocabulary files (``encoder.json``) hold a JSON object mapping symbol
strings to integer ids.
"""

import json
import logging
from collections.abc import Iterable
from pathlib import Path

from ._decorators import measure_time
from .errors import ModelLoadError
from .types import BpeRanks, Pair, Vocab

log = logging.getLogger(__name__)


def parse_bpe_ranks(lines: Iterable[str], *, source: str | None = None) -> BpeRanks:
    """
    Build a rank table from merge-rule lines.

    A leading ``#`` header line and trailing blank lines are skipped. Ranks
    start at 0 for the first rule.

    :param lines: Lines of the merge-rule resource.
    :param source: Path used in error messages.
    :raises ModelLoadError: On a malformed line, a blank line between rules,
        or a duplicate pair.
    """
    rows = [line.rstrip("\r\n") for line in lines]
    start = 1 if rows and rows[0].startswith("#") else 0
    # trailing blank entry after the final newline
    end = len(rows)
    while end > start and not rows[end - 1].strip():
        end -= 1

    ranks: BpeRanks = {}
    for line_no in range(start, end):
        fields = rows[line_no].split()
        if len(fields) != 2:
            raise ModelLoadError(
                f"invalid merge rule: {rows[line_no]!r}",
                model_path=source,
                line_no=line_no + 1,
            )
        pair: Pair = (fields[0], fields[1])
        if pair in ranks:
            raise ModelLoadError(
                f"duplicate merge rule: {rows[line_no]!r}",
                model_path=source,
                line_no=line_no + 1,
            )
        ranks[pair] = len(ranks)

    if not ranks:
        log.warning(f"merge rule table is empty (source: {source})")
    log.debug(f"parsed {len(ranks)} merge rules")
    return ranks


def parse_vocab(data: object, *, source: str | None = None) -> Vocab:
    """
    Validate a decoded JSON vocabulary.

    :raises ModelLoadError: If ``data`` is not a mapping of str to non-negative int.
    """
    if not isinstance(data, dict):
        raise ModelLoadError("vocabulary must be a JSON object", model_path=source)

    vocab: Vocab = {}
    for symbol, tok in data.items():
        # bool is an int subclass but never a valid id
        if not isinstance(tok, int) or isinstance(tok, bool) or tok < 0:
            raise ModelLoadError(
                f"invalid id for symbol {symbol!r}: {tok!r}", model_path=source
            )
        vocab[symbol] = tok

    log.debug(f"parsed vocabulary with {len(vocab)} entries")
    return vocab


@measure_time
def load_bpe_ranks(path: str | Path) -> BpeRanks:
    """
    Load a merge-rule file into a rank table.

    :param path: Path to a ``vocab.bpe`` style file.
    :raises ModelLoadError: If the file is missing, unreadable or malformed.
    """
    path = Path(path)
    log.info(f"loading merge rules from {path}")
    try:
        with path.open("r", encoding="utf-8") as f:
            lines = f.readlines()
    except (OSError, UnicodeDecodeError) as e:
        raise ModelLoadError("cannot read merge rules", model_path=str(path)) from e

    ranks = parse_bpe_ranks(lines, source=str(path))
    log.info(f"loaded {len(ranks)} merge rules")
    return ranks


@measure_time
def load_vocab(path: str | Path) -> Vocab:
    """
    Load a JSON vocabulary file.

    :param path: Path to an ``encoder.json`` style file.
    :raises ModelLoadError: If the file is missing, unreadable or malformed.
    """
    path = Path(path)
    log.info(f"loading vocabulary from {path}")
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, UnicodeDecodeError) as e:
        raise ModelLoadError("cannot read vocabulary", model_path=str(path)) from e
    except json.JSONDecodeError as e:
        raise ModelLoadError(
            f"invalid vocabulary JSON: {e.msg}", model_path=str(path), line_no=e.lineno
        ) from e

    vocab = parse_vocab(data, source=str(path))
    log.info(f"loaded vocabulary with {len(vocab)} entries")
    return vocab
