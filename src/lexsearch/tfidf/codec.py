"""
Persistence codec for the frequency model.

Serialized form (JSON, versionless):
    {"docs": {doc_id: {"count": int, "tf": {term: int}}}, "df": {term: int}}

Decoding validates structure with pydantic and, by default, the model
invariants as well. Any failure is reported as CorruptIndex with the field
path and, where it can be attributed, the document id.
"""

import json
from typing import Any, Dict, Optional, Tuple

from pydantic import ValidationError

from ..errors import CorruptIndex, InconsistentModel
from .model import FrequencyModel


def encode(model: FrequencyModel) -> Dict[str, Any]:
    """Convert a model into plain nested dicts"""
    return model.model_dump()


def dumps(model: FrequencyModel, indent: Optional[int] = 2) -> str:
    """Serialize a model to JSON text"""
    return json.dumps(encode(model), ensure_ascii=False, indent=indent)


def _locate(loc: Tuple[Any, ...]) -> Tuple[str, Optional[str]]:
    """Turn a pydantic error location into (field path, doc_id)"""
    field = ".".join(str(part) for part in loc) or "<root>"
    doc_id = None
    if len(loc) >= 2 and loc[0] == "docs":
        doc_id = str(loc[1])
    return field, doc_id


def _from_validation_error(exc: ValidationError) -> CorruptIndex:
    errors = exc.errors()
    first = errors[0]
    field, doc_id = _locate(tuple(first.get("loc", ())))
    message = first.get("msg", "invalid value")
    if len(errors) > 1:
        message = f"{message} (+{len(errors) - 1} more error(s))"
    return CorruptIndex(message, field=field, doc_id=doc_id)


def _check(model: FrequencyModel) -> None:
    try:
        model.verify()
    except InconsistentModel as exc:
        if exc.doc_id is not None:
            field = f"docs.{exc.doc_id}"
        else:
            field = f"df.{exc.term}"
        raise CorruptIndex(str(exc), field=field, doc_id=exc.doc_id) from exc


def decode(data: Any, verify: bool = True) -> FrequencyModel:
    """
    Rebuild a model from plain nested dicts.

    Args:
        data: Output of encode() or json.loads() of a persisted index
        verify: Also check the tf/df invariants (default). Pass False to trust
            the input and skip the full scan.

    Raises:
        CorruptIndex: malformed structure or broken invariant
    """
    if not isinstance(data, dict):
        raise CorruptIndex(f"expected an object, got {type(data).__name__}", field="<root>")

    try:
        model = FrequencyModel.model_validate(data)
    except ValidationError as exc:
        raise _from_validation_error(exc) from exc

    if verify:
        _check(model)
    return model


def loads(text: str | bytes, verify: bool = True) -> FrequencyModel:
    """
    Deserialize a model from JSON text.

    Raises:
        CorruptIndex: invalid JSON, malformed structure or broken invariant
    """
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise CorruptIndex(f"invalid JSON: {exc}", field="<root>") from exc
    return decode(data, verify=verify)
