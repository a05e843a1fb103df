"""Unit tests for Encoder encode, cache behaviour, special tokens and batching."""

import pytest

import gpt_encoder as genc
from gpt_encoder.cache import EncodeCache
from gpt_encoder.errors import (
    ModelLoadError,
    SpecialTokenError,
    ParallelModeError,
    VocabularyError,
)


# Reference fixtures
# ---------------------------------------------------------------------------


def test_single_merge_fixture():
    """One rule merging a and b yields the merged id."""
    enc = genc.Encoder({"a": 1, "b": 2, "ab": 3}, {("a", "b"): 0})
    assert enc.bpe("ab") == "ab"
    assert enc.encode("ab") == [3]


def test_empty_rank_table_fixture():
    """Without rules each byte is looked up on its own."""
    enc = genc.Encoder({"x": 5, "y": 6}, {})
    assert enc.bpe("xy") == "x y"
    assert enc.encode("xy") == [5, 6]


def test_encode_known_text(encoder):
    """Merged symbols map to their ids in token order."""
    # "the" -> the(259); " there" -> Ġthe(258) r e
    assert encoder.encode("the there") == [259, 258, 114, 101]


def test_empty_string(encoder):
    """Empty string encodes to empty list."""
    assert encoder.encode("") == []


def test_whitespace_and_binary_text(encoder):
    """Any byte sequence is encodable with a full byte vocabulary."""
    text = "   \n\t\x00\x7f"
    assert encoder.encode(text) == list(text.encode("utf-8"))


def test_unicode_text_encodes_per_byte(encoder):
    """Characters without merges fall back to one id per UTF-8 byte."""
    assert encoder.encode("日本") == list("日本".encode("utf-8"))


def test_lone_surrogate_encodes(encoder):
    """Lone surrogates from surrogateescape-decoded input encode as UTF-8 bytes."""
    assert encoder.encode("a\udc80b") == [97, 0xED, 0xB2, 0x80, 98]


def test_empty_pattern_matches_skipped(vocab):
    """A custom pattern that matches the empty string yields no empty tokens."""
    enc = genc.Encoder(vocab, {}, pattern=r"\w*|\W")
    assert enc.encode("a b") == [97, 32, 98]


# Cache
# ---------------------------------------------------------------------------


def test_cache_transparency(vocab, bpe_ranks):
    """Cold and warm cache give identical results."""
    text = "the there, the other there! 123 the"
    enc = genc.Encoder(vocab, bpe_ranks)
    cold = enc.encode(text)
    assert enc.cache_size() > 0
    warm = enc.encode(text)
    assert warm == cold
    assert genc.Encoder(vocab, bpe_ranks).encode(text) == cold


def test_cache_keyed_by_byte_mapped_token(encoder):
    """Cache keys are the byte-mapped pretokens."""
    encoder.encode(" there")
    assert "Ġthere" in encoder.cache
    assert encoder.cache.get("Ġthere") == "Ġthe r e"


def test_cache_hit_skips_merge(encoder, monkeypatch):
    """A cached token is not merged again."""
    encoder.encode("the")
    calls = []
    monkeypatch.setattr(encoder, "_merge", lambda token: calls.append(token) or "x")
    assert encoder.encode("the") == [259]
    assert calls == []
    assert encoder.cache.hits >= 1


def test_cache_entries_are_write_once():
    """Once a key is stored, later writers get the stored value back."""
    cache = EncodeCache()

    def racing_compute(token):
        # another writer stores the key while this one is still computing
        cache.lookup_or_compute(token, lambda t: "first")
        return "second"

    assert cache.lookup_or_compute("k", racing_compute) == "first"
    assert cache.lookup_or_compute("k", lambda t: "third") == "first"
    assert len(cache) == 1
    assert cache.misses == 2
    assert cache.hits == 1


# Errors
# ---------------------------------------------------------------------------


def test_vocabulary_mismatch_raises_and_keeps_encoder_usable(vocab, bpe_ranks):
    """A missing merged symbol aborts the call but not the encoder."""
    del vocab["Ġthe"]
    enc = genc.Encoder(vocab, bpe_ranks)
    with pytest.raises(VocabularyError) as exc_info:
        enc.encode("the there")
    assert exc_info.value.invalid_symbol == "Ġthe"
    assert enc.encode("the") == [259]
    assert enc.cache.get("Ġthere") == "Ġthe r e"


def test_invalid_rank_table_rejected(vocab):
    """Ranks must be unique and below the table size."""
    with pytest.raises(ModelLoadError):
        genc.Encoder(vocab, {("a", "b"): 0, ("c", "d"): 0})
    with pytest.raises(ModelLoadError):
        genc.Encoder(vocab, {("a", "b"): 1})


def test_unknown_special_token_rejected(vocab, bpe_ranks):
    """Special tokens must exist in the vocabulary."""
    with pytest.raises(VocabularyError):
        genc.Encoder(vocab, bpe_ranks, special_tokens=["<|fim|>"])


# Special tokens
# ---------------------------------------------------------------------------


def test_endoftext_registered_by_default(encoder):
    """<|endoftext|> is picked up from the vocabulary."""
    assert encoder.special_toks == {genc.ENDOFTEXT: 261}


def test_special_tokens_are_ordinary_text_by_default(encoder):
    """Without allowed_special, special token text is BPE-encoded."""
    ids = encoder.encode("the<|endoftext|>")
    assert 261 not in ids
    assert ids[0] == 259


def test_allowed_special_all(encoder):
    """Allowed special tokens map straight to their ids."""
    assert encoder.encode("the<|endoftext|>the", allowed_special="all") == [259, 261, 259]


def test_allowed_special_subset(encoder):
    """Only the named tokens are emitted atomically."""
    assert encoder.encode("<|endoftext|>", allowed_special={"<|endoftext|>"}) == [261]
    assert 261 not in encoder.encode("<|endoftext|>", allowed_special=set())


def test_allowed_special_unregistered_raises(encoder):
    """Naming a token that was never registered raises."""
    with pytest.raises(SpecialTokenError) as exc_info:
        encoder.encode("the", allowed_special={"<|fim|>"})
    assert exc_info.value.found_tokens == {"<|fim|>"}


def test_longer_special_token_wins(vocab, bpe_ranks):
    """Overlapping special tokens match the longest one."""
    vocab["<|a|>"] = 300
    vocab["<|a|>x"] = 301
    enc = genc.Encoder(vocab, bpe_ranks, special_tokens=["<|a|>", "<|a|>x"])
    assert enc.encode("<|a|>x<|a|>", allowed_special="all") == [301, 300]


# Batch encode
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("mode", ["off", "batch", "auto"])
def test_encode_batch_matches_single(encoder, mode):
    """Batch results equal per-text encodes in input order."""
    texts = ["the there", "", "other there!", "the"] * 8
    expected = [encoder.encode(text) for text in texts]
    assert encoder.encode_batch(texts, num_workers=4, parallel_mode=mode) == expected


def test_encode_batch_shared_cache_from_threads(vocab, bpe_ranks):
    """Threads sharing one cold encoder agree with a serial encoder."""
    texts = [f"the there {i} there the" for i in range(64)]
    serial = genc.Encoder(vocab, bpe_ranks)
    shared = genc.Encoder(vocab, bpe_ranks)
    assert shared.encode_batch(texts, num_workers=8, parallel_mode="batch") == [
        serial.encode(text) for text in texts
    ]
    assert shared.cache.get("Ġthere") == serial.cache.get("Ġthere")


def test_cache_counters_exact_under_threads(vocab, bpe_ranks):
    """Every pretoken lookup is counted once as a hit or a miss."""
    texts = [f"the there {i} other the" for i in range(64)]
    enc = genc.Encoder(vocab, bpe_ranks)
    enc.encode_batch(texts, num_workers=8, parallel_mode="batch")
    lookups = sum(len(enc.pretokenizer.split(text)) for text in texts)
    assert enc.cache.hits + enc.cache.misses == lookups
    assert enc.cache.misses >= enc.cache_size()


def test_encode_batch_allowed_special(encoder):
    """Batch encoding passes allowed_special to every text."""
    texts = ["the<|endoftext|>", "<|endoftext|>the"] * 4
    encoded = encoder.encode_batch(
        texts, allowed_special="all", num_workers=4, parallel_mode="batch"
    )
    assert encoded == [[259, 261], [261, 259]] * 4


def test_encode_batch_empty(encoder):
    """Empty batch gives empty result."""
    assert encoder.encode_batch([]) == []


def test_unknown_parallel_mode_raises(encoder):
    """Unknown modes raise ParallelModeError."""
    with pytest.raises(ParallelModeError):
        encoder.encode_batch(["a"], parallel_mode="chunk")
    assert "batch" in genc.list_parallel_modes()


def test_vocab_size(encoder):
    """Vocab size counts bytes, merges and special tokens."""
    assert encoder.vocab_size() == 256 + 5 + 1
