"""
Core Byte Pair Encoding (BPE) merge operations.

All functions work on byte-mapped strings (see ``_byte_map``) and a rank
table of symbol pairs, where a lower rank merges first.
"""

from ._ordered_set import OrderedPairSet
from .types import BpeRanks, Pair, Word


def get_pairs(word: Word) -> OrderedPairSet:
    """Return the distinct adjacent pairs of ``word`` in first-occurrence order."""
    return OrderedPairSet(zip(word, word[1:]))


def select_pair(pairs: OrderedPairSet, ranks: BpeRanks, max_rank: int) -> tuple[Pair | None, int]:
    """
    Pick the lowest-ranked pair and return it with its rank.

    Pairs are scanned in reverse and a candidate only replaces the current
    best on a strictly smaller rank, so among tied pairs the one occurring
    last in the word wins. Unknown pairs rank as ``max_rank``; if nothing
    beats it the returned rank is ``max_rank``.
    """
    best: Pair | None = None
    best_rank = max_rank
    for pair in reversed(pairs):
        rank = ranks.get(pair, max_rank)
        if best is None or rank < best_rank:
            best, best_rank = pair, rank
    return best, best_rank


def merge_pair(word: Word, target: Pair) -> Word:
    """
    Merge all non-overlapping occurrences of ``target`` left to right.

    :param word: Current symbol sequence.
    :param target: The adjacent pair to merge.
    :return: New symbol sequence with every occurrence concatenated.
    """
    first, second = target
    new_word: Word = []

    i = 0
    n = len(word)
    while i < n:
        # check if we can form a pair and it matches the target
        if i < n - 1 and word[i] == first and word[i + 1] == second:
            new_word.append(first + second)
            i += 2
        else:
            new_word.append(word[i])
            i += 1

    return new_word


def bpe(token: str, ranks: BpeRanks) -> str:
    """
    Apply merges from ``ranks`` to a byte-mapped token until none qualify.

    The result is the final symbols joined with a single space. Space is
    never a byte-mapped character, so it cannot be confused with content.

    Each pass rescans the remaining word, which is quadratic in token length
    in the worst case.

    :param token: Byte-mapped token string.
    :param ranks: Merge rank table.
    :return: Space-separated merged symbols.
    """
    word: Word = list(token)
    if len(word) <= 1:
        return token

    # sentinel rank for "no known merge"
    max_rank = len(ranks)

    while len(word) > 1:
        pair, rank = select_pair(get_pairs(word), ranks, max_rank)
        if pair is None or rank == max_rank:
            break
        word = merge_pair(word, pair)

    return " ".join(word)
