"""
Frequency model - the persisted TF-IDF index.

Structure:
{
    "docs": {
        "<doc_id>": {
            "count": <total tokens in document>,
            "tf": {"<term>": <occurrences in document>, ...}
        },
        ...
    },
    "df": {"<term>": <number of documents containing term>, ...}
}

Invariants:
- sum(record.tf.values()) == record.count for every document
- every tf value is >= 1 (absent terms are not stored)
- df[term] == number of documents whose tf contains term
- 1 <= df[term] <= number of documents
"""

from typing import Annotated, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt

from ..errors import InconsistentModel

TokenCount = Annotated[StrictInt, Field(ge=0)]
Occurrences = Annotated[StrictInt, Field(ge=1)]


class DocumentRecord(BaseModel):
    """Per-document token total and term counts"""

    model_config = ConfigDict(extra="forbid")

    count: TokenCount = Field(0, description="Total number of tokens, repeats included")
    tf: Dict[str, Occurrences] = Field(default_factory=dict, description="Term -> occurrences")


class FrequencyModel(BaseModel):
    """Per-document records plus the corpus document-frequency table"""

    model_config = ConfigDict(extra="forbid")

    docs: Dict[str, DocumentRecord] = Field(default_factory=dict)
    df: Dict[str, Occurrences] = Field(default_factory=dict)

    @property
    def document_count(self) -> int:
        return len(self.docs)

    def document_frequency(self, term: str) -> int:
        """Number of documents containing term (0 when unseen)"""
        return self.df.get(term, 0)

    def get_document(self, doc_id: str) -> Optional[DocumentRecord]:
        return self.docs.get(doc_id)

    def verify(self) -> None:
        """
        Check every structural invariant.

        Raises:
            InconsistentModel: first violation found, with doc_id/term context
        """
        expected_df: Dict[str, int] = {}

        for doc_id, record in self.docs.items():
            total = 0
            for term, occurrences in record.tf.items():
                if occurrences < 1:
                    raise InconsistentModel(
                        f"term {term!r} has non-positive count {occurrences}",
                        doc_id=doc_id,
                        term=term,
                    )
                total += occurrences
                expected_df[term] = expected_df.get(term, 0) + 1

            if total != record.count:
                raise InconsistentModel(
                    f"term counts sum to {total} but document count is {record.count}",
                    doc_id=doc_id,
                )

        for term, frequency in self.df.items():
            expected = expected_df.get(term, 0)
            if frequency != expected:
                raise InconsistentModel(
                    f"document frequency of {term!r} is {frequency}, "
                    f"but {expected} document(s) contain it",
                    term=term,
                )

        missing = expected_df.keys() - self.df.keys()
        if missing:
            term = min(missing)
            raise InconsistentModel(
                f"term {term!r} occurs in documents but has no document frequency",
                term=term,
            )
