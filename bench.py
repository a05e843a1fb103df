"""Benchmark encode() and encode_batch() on a slice of the Sci-Fi Gutenberg dataset.

Outputs a row with columns:
  Corpus Size | Cold Encode | Warm Encode | Batch Encode | Cache Entries | Tokens/Byte
"""

import argparse
import logging
import time

from datasets import load_dataset

from gpt_encoder import from_files

HF_DATASET = "stevez80/Sci-Fi-Books-gutenberg"


def load_corpus(num_docs: int | None) -> list[str]:
    """Load up to `num_docs` documents via dataset indexing; full dataset when None."""
    print(f"Loading {HF_DATASET} (non-streaming) …")
    ds = load_dataset(HF_DATASET, split="train")
    if num_docs is not None:
        return ds[:num_docs]["text"]
    return ds["text"]


def throughput(total_bytes: int, elapsed: float) -> str:
    return f"{total_bytes / elapsed / (1024 * 1024):.2f} MB/sec"


def main() -> None:
    """Run the encode benchmark and print a markdown table row."""
    parser = argparse.ArgumentParser(description="Benchmark gpt_encoder encoding.")
    parser.add_argument("--bpe", required=True, help="Path to vocab.bpe merge rules.")
    parser.add_argument("--vocab", required=True, help="Path to encoder.json vocabulary.")
    parser.add_argument(
        "--num-docs",
        type=int,
        default=None,
        help="Number of documents to encode (default: full dataset).",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker threads for batch encoding (default: CPU count).",
    )
    parser.add_argument("--verbose", action="store_true", help="Log loader timings.")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    docs = load_corpus(args.num_docs)
    if not docs:
        raise RuntimeError("No documents loaded from dataset.")

    total_bytes = sum(len(d.encode("utf-8")) for d in docs)
    corpus_mb = total_bytes / (1024 * 1024)

    enc = from_files(args.bpe, args.vocab)

    # --- Cold cache ---
    t0 = time.perf_counter()
    encoded = [enc.encode(doc) for doc in docs]
    cold_elapsed = time.perf_counter() - t0

    # --- Warm cache (same encoder) ---
    t0 = time.perf_counter()
    warm = [enc.encode(doc) for doc in docs]
    warm_elapsed = time.perf_counter() - t0
    if warm != encoded:
        raise RuntimeError("warm cache encoding differs from cold cache encoding")

    # --- Threaded batch on a fresh encoder ---
    batch_enc = from_files(args.bpe, args.vocab)
    t0 = time.perf_counter()
    batched = batch_enc.encode_batch(docs, num_workers=args.workers, parallel_mode="batch")
    batch_elapsed = time.perf_counter() - t0
    if batched != encoded:
        raise RuntimeError("batch encoding differs from serial encoding")

    total_tokens = sum(len(seq) for seq in encoded)

    print()
    header = (
        f"| {'Corpus Size':12} | {'Cold Encode':16} | {'Warm Encode':16} "
        f"| {'Batch Encode':16} | {'Cache Entries':13} | {'Tokens/Byte':11} |"
    )
    sep = (
        f"| {'-' * 12} | {'-' * 16} | {'-' * 16} "
        f"| {'-' * 16} | {'-' * 13} | {'-' * 11} |"
    )
    row = (
        f"| {f'{corpus_mb:.2f} MB':12} | {throughput(total_bytes, cold_elapsed):16} "
        f"| {throughput(total_bytes, warm_elapsed):16} "
        f"| {throughput(total_bytes, batch_elapsed):16} "
        f"| {enc.cache_size():13,} | {total_tokens / total_bytes:11.3f} |"
    )
    print(header)
    print(sep)
    print(row)
    print()


if __name__ == "__main__":
    main()
