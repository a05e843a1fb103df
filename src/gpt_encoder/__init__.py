"""gpt_encoder: byte-level BPE text encoder for GPT-style vocabularies."""

from ._byte_map import bytes_to_unicode
from .encoder import ENDOFTEXT, Encoder
from .errors import (
    EncoderError,
    ModelLoadError,
    ParallelModeError,
    PatternError,
    SpecialTokenError,
    VocabularyError,
)
from .factory import from_files, get_encoder, set_default_encoder
from .loader import load_bpe_ranks, load_vocab
from .parallel import ParallelMode, list_parallel_modes
from .pattern import TokenPattern, get_pattern, list_patterns
from .pretokenizer import Pretokenizer

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("gpt-encoder")
except PackageNotFoundError:
    __version__ = "dev"

__all__ = [
    "ENDOFTEXT",
    "Encoder",
    "Pretokenizer",
    "TokenPattern",
    "ParallelMode",
    "EncoderError",
    "ModelLoadError",
    "ParallelModeError",
    "PatternError",
    "SpecialTokenError",
    "VocabularyError",
    "bytes_to_unicode",
    "from_files",
    "get_encoder",
    "set_default_encoder",
    "load_bpe_ranks",
    "load_vocab",
    "get_pattern",
    "list_patterns",
    "list_parallel_modes",
]
