"""Shared fixtures: small merge tables built the way GPT-2 vocabularies are."""

import pytest

import gpt_encoder as genc
from gpt_encoder._byte_map import BYTE_ENCODER


MERGES = [
    ("Ġ", "t"),
    ("h", "e"),
    ("Ġt", "he"),
    ("t", "he"),
    ("e", "r"),
]


@pytest.fixture
def bpe_ranks():
    """Return a five-rule rank table."""
    return {pair: rank for rank, pair in enumerate(MERGES)}


@pytest.fixture
def vocab():
    """Return a vocabulary covering every byte, every merge and <|endoftext|>."""
    # ids 0..255 line up with byte values
    table = {ch: b for b, ch in BYTE_ENCODER.items()}
    for rank, (a, b) in enumerate(MERGES):
        table[a + b] = 256 + rank
    table["<|endoftext|>"] = 256 + len(MERGES)
    return table


@pytest.fixture
def encoder(vocab, bpe_ranks):
    """Return an encoder over the small tables."""
    return genc.Encoder(vocab, bpe_ranks)


@pytest.fixture(autouse=True)
def reset_default_encoder():
    """Keep the process-wide default encoder from leaking between tests."""
    genc.set_default_encoder(None)
    yield
    genc.set_default_encoder(None)
