"""
Classic TF-IDF scorer.

Formula:
    tf(t, d)  = count(t in d) / total_tokens(d)        (0 when d has no tokens)
    idf(t)    = ln(N / max(df(t), 1))
    score(d)  = Σ tf(q_i, d) × idf(q_i)   over query tokens q_1..q_k

Where:
    N = number of documents in the model
    df(t) = number of documents containing t

Query tokens are not de-duplicated: a term repeated in the query counts once
per occurrence. Every document is scored (full scan, no pruning), and results
are ordered by score descending, then document id ascending so that equal
scores always come out in the same order.
"""

import math
from typing import Iterable, List, Tuple

from .model import DocumentRecord, FrequencyModel
from .tokenizer import tokenize


def tf(term: str, record: DocumentRecord) -> float:
    """
    Term frequency of term within one document.

    Returns a value in [0, 1]; exactly 0 for a document with no tokens.
    """
    if record.count == 0:
        return 0.0
    return record.tf.get(term, 0) / record.count


def idf(term: str, model: FrequencyModel) -> float:
    """
    Inverse document frequency of term over the whole corpus.

    Unseen terms use df = 1, so the result is finite. An empty corpus has
    no rarity information and yields 0.
    """
    n = model.document_count
    if n == 0:
        return 0.0
    df = max(model.df.get(term, 1), 1)
    return math.log(n / df)


def score(query_terms: Iterable[str], record: DocumentRecord, model: FrequencyModel) -> float:
    """Sum tf × idf over all query terms for one document"""
    return sum(tf(term, record) * idf(term, model) for term in query_terms)


def rank(model: FrequencyModel, query_text: str) -> List[Tuple[str, float]]:
    """
    Rank every document in the model against a free-text query.

    Args:
        model: Built frequency model
        query_text: Raw query string (tokenized with the index tokenizer)

    Returns:
        [(doc_id, score), ...] sorted by score desc, doc_id asc

    Example:
        >>> from .index_builder import build_index
        >>> model = build_index([("A", "the cat sat"), ("B", "the cat ran ran")])
        >>> [(doc, round(s, 3)) for doc, s in rank(model, "ran")]
        [('B', 0.347), ('A', 0.0)]
    """
    query_terms = list(tokenize(query_text))

    # idf depends only on the term, so compute it once per query
    weights = {term: idf(term, model) for term in set(query_terms)}

    results = []
    for doc_id, record in model.docs.items():
        total = 0.0
        for term in query_terms:
            total += tf(term, record) * weights[term]
        results.append((doc_id, total))

    results.sort(key=lambda item: (-item[1], item[0]))
    return results
