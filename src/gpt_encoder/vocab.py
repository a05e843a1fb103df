"""Lookup of merged symbols in the vocabulary."""

from .errors import VocabularyError
from .types import TokenId, Vocab


class VocabEncoder:
    """Map space-separated merged symbols to integer ids."""

    def __init__(self, vocab: Vocab) -> None:
        # symbol -> id
        self.vocab: Vocab = dict(vocab)

    def ids_for(self, merged: str) -> list[TokenId]:
        """
        Resolve every symbol of a merged string to its id.

        :param merged: Symbols joined by single spaces, as returned by BPE.
        :return: Ids in symbol order.
        :raises VocabularyError: If a symbol is not in the vocabulary.
        """
        ids: list[TokenId] = []
        for symbol in merged.split(" "):
            try:
                ids.append(self.vocab[symbol])
            except KeyError:
                # never fall back to a placeholder id
                raise VocabularyError(
                    "merged symbol not found in vocabulary", invalid_symbol=symbol
                ) from None
        return ids

    def __contains__(self, symbol: object) -> bool:
        return symbol in self.vocab

    def __len__(self) -> int:
        return len(self.vocab)
