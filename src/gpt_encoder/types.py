"""
Core types for byte-level BPE encoding.
"""

from typing import TypeAlias

Symbol: TypeAlias = str
Word: TypeAlias = list[Symbol]
Pair: TypeAlias = tuple[Symbol, Symbol]
TokenId: TypeAlias = int
BpeRanks: TypeAlias = dict[Pair, int]
Vocab: TypeAlias = dict[str, TokenId]
