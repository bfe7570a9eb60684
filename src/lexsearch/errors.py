"""
Error types shared by the indexing and ranking pipeline.

Kinds:
- ExtractionFailure: one source document could not be turned into text
  (recovered by skipping the document during indexing)
- MalformedQuery: query bytes are not valid UTF-8 (rejected at the boundary)
- CorruptIndex: persisted index failed to decode or failed validation
- InconsistentModel: a frequency model breaks its structural invariants

A document with zero tokens is not an error: its term frequencies are 0.
"""

from typing import Optional


class SearchError(Exception):
    """Base class for all lexsearch errors"""


class ExtractionFailure(SearchError):
    """Text could not be extracted from a source document"""

    def __init__(self, doc_id: str, reason: str):
        super().__init__(f"{doc_id}: {reason}")
        self.doc_id = doc_id
        self.reason = reason


class MalformedQuery(SearchError):
    """Query payload is not valid text"""


class InconsistentModel(SearchError):
    """Frequency model violates a document/corpus frequency invariant"""

    def __init__(self, message: str, doc_id: Optional[str] = None, term: Optional[str] = None):
        super().__init__(message)
        self.doc_id = doc_id
        self.term = term


class CorruptIndex(SearchError):
    """Persisted index could not be decoded or failed structural validation"""

    def __init__(self, message: str, field: Optional[str] = None, doc_id: Optional[str] = None):
        super().__init__(message)
        self.field = field
        self.doc_id = doc_id

    def __str__(self) -> str:
        context = []
        if self.field:
            context.append(f"field={self.field}")
        if self.doc_id:
            context.append(f"doc={self.doc_id}")
        message = super().__str__()
        return f"{message} ({', '.join(context)})" if context else message
