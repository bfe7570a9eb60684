"""
TF-IDF relevance engine.

Components:
- tokenizer: Lazy, restartable text-to-term splitting
- model: Persisted frequency model (per-document counts + document frequency)
- index_builder: Folds (doc_id, text) streams into a verified model
- scorer: Classic TF-IDF scoring and deterministic ranking
- codec: JSON (de)serialization with structural validation

The engine is pure and synchronous: no I/O, no shared mutable state across
calls. File walking, text extraction and storage live outside this package.
"""

from .tokenizer import tokenize, Lexer
from .model import DocumentRecord, FrequencyModel
from .index_builder import IndexAccumulator, IndexStats, build_index, build_index_sharded
from .scorer import tf, idf, score, rank
from .codec import encode, decode, dumps, loads

__all__ = [
    "tokenize",
    "Lexer",
    "DocumentRecord",
    "FrequencyModel",
    "IndexAccumulator",
    "IndexStats",
    "build_index",
    "build_index_sharded",
    "tf",
    "idf",
    "score",
    "rank",
    "encode",
    "decode",
    "dumps",
    "loads",
]
