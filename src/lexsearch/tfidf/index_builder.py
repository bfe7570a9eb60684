"""
TF-IDF index builder - folds a stream of documents into a frequency model.

Input is a flat, lazy stream of (doc_id, text) pairs supplied by the text
extraction layer. A text of None marks a document whose extraction failed:
it is skipped and counted, never fatal.

The accumulator owns all intermediate state. Once finished it hands over a
verified FrequencyModel and the model is never mutated again; reindexing
always starts from a fresh accumulator.

Sharding:
    Independent shards can be accumulated in parallel and merged. Document
    frequency is only ever derived from per-document term sets, so a term is
    counted once per document no matter how shards are split.
"""

import logging
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from .model import DocumentRecord, FrequencyModel
from .tokenizer import tokenize

logger = logging.getLogger(__name__)

Document = Tuple[str, Optional[str]]


@dataclass
class IndexStats:
    """Counters reported after an indexing run"""

    indexed: int = 0
    skipped: int = 0
    replaced: int = 0
    unique_terms: int = 0


class IndexAccumulator:
    """Explicit fold state for building a FrequencyModel"""

    def __init__(self):
        self._docs: Dict[str, Tuple[int, Counter]] = {}
        self._df: Counter = Counter()
        self.stats = IndexStats()

    def __len__(self) -> int:
        return len(self._docs)

    def add(self, doc_id: str, text: Optional[str]) -> bool:
        """
        Tokenize one document and fold it into the accumulator.

        Args:
            doc_id: Unique document identifier (e.g. file path)
            text: Extracted plain text, or None if extraction failed

        Returns:
            True if the document was indexed, False if it was skipped
        """
        if text is None:
            self.stats.skipped += 1
            logger.debug(f"Skipping {doc_id}: no extracted text")
            return False

        term_counts = Counter(tokenize(text))
        total = sum(term_counts.values())
        self._put(doc_id, total, term_counts)
        self.stats.indexed += 1
        return True

    def _put(self, doc_id: str, total: int, term_counts: Counter) -> None:
        previous = self._docs.get(doc_id)
        if previous is not None:
            # Withdraw the replaced record's document frequency contribution
            self._df.subtract(previous[1].keys())
            self._df = +self._df
            self.stats.replaced += 1
            logger.debug(f"Replacing existing record for {doc_id}")

        self._docs[doc_id] = (total, term_counts)
        self._df.update(term_counts.keys())

    def merge(self, other: "IndexAccumulator") -> "IndexAccumulator":
        """
        Fold another accumulator into this one.

        Records from `other` win on duplicate document ids.
        """
        for doc_id, (total, term_counts) in other._docs.items():
            self._put(doc_id, total, term_counts)
        self.stats.indexed += other.stats.indexed
        self.stats.skipped += other.stats.skipped
        self.stats.replaced += other.stats.replaced
        return self

    def finish(self) -> FrequencyModel:
        """
        Build the final FrequencyModel.

        Raises:
            InconsistentModel: accumulated state breaks a model invariant;
                the run must be aborted rather than persisted
        """
        docs = {
            doc_id: DocumentRecord.model_construct(count=total, tf=dict(term_counts))
            for doc_id, (total, term_counts) in self._docs.items()
        }
        model = FrequencyModel.model_construct(docs=docs, df=dict(self._df))
        model.verify()

        self.stats.unique_terms = len(model.df)
        logger.debug(
            f"Built TF-IDF index: {len(docs)} documents, {self.stats.unique_terms} unique terms "
            f"({self.stats.skipped} skipped, {self.stats.replaced} replaced)"
        )
        return model


def accumulate(documents: Iterable[Document]) -> IndexAccumulator:
    """Fold a document stream into a fresh accumulator"""
    accumulator = IndexAccumulator()
    for doc_id, text in documents:
        accumulator.add(doc_id, text)
    return accumulator


def build_index(documents: Iterable[Document]) -> FrequencyModel:
    """
    Build a frequency model from (doc_id, text) pairs.

    Args:
        documents: Flat stream of (doc_id, text); text=None means extraction
            failed and the document is skipped

    Returns:
        Fully populated, verified FrequencyModel

    Example:
        >>> model = build_index([("a", "the cat sat"), ("b", "the cat ran ran")])
        >>> model.df["RAN"], model.docs["b"].count
        (1, 4)
    """
    return accumulate(documents).finish()


def build_index_sharded(
    shards: Iterable[Iterable[Document]],
    max_workers: int = 4,
) -> Tuple[FrequencyModel, IndexStats]:
    """
    Build a frequency model from independent document shards in parallel.

    Each shard is folded into its own accumulator on a worker thread; the
    accumulators are merged in shard order, so later shards win on duplicate
    document ids exactly as a sequential run over the concatenated shards would.

    Args:
        shards: Iterable of document streams
        max_workers: Thread pool size

    Returns:
        (model, stats) for the whole run
    """
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        partials: List[IndexAccumulator] = list(executor.map(accumulate, shards))

    merged = IndexAccumulator()
    for partial in partials:
        merged.merge(partial)

    model = merged.finish()
    return model, merged.stats
