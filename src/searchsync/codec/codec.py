"""Document codec — Converts domain entities to search documents and back.

Encoding rules:
  - Documents are string-keyed JSON objects using the entities' wire aliases.
  - Timestamps are integer nanoseconds since the Unix epoch (UTC), in both
    directions. A numeric value for a timestamp field is never read as
    seconds or milliseconds.
  - Output is compact unless ``CodecSettings.indent_output`` is set.

Decoding rules:
  - Fields unknown to the target type are dropped.
  - Integer text in a timestamp field is nanoseconds too; ISO strings are
    parsed as dates.
  - A bare scalar where a sequence is expected becomes a one-element list,
    since engines may collapse single-element arrays.
  - Anything else that does not fit raises ``MappingFailure``.
"""

from __future__ import annotations

import json
import re
import types
from collections.abc import Mapping, MutableSequence, Sequence, Set
from datetime import UTC, datetime, timedelta
from typing import Annotated, Any, TypeVar, Union, get_args, get_origin

from pydantic import BaseModel
from pydantic.fields import FieldInfo
from pydantic_core import to_jsonable_python

from searchsync.config.settings import CodecSettings
from searchsync.exceptions import MappingFailure

T = TypeVar("T", bound=BaseModel)

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

_SEQUENCE_ORIGINS = (list, tuple, set, frozenset, Sequence, MutableSequence, Set)
_MAPPING_ORIGINS = (dict, Mapping)
_ARRAY_VALUES = (list, tuple, set, frozenset)
_INTEGER_TEXT = re.compile(r"-?\d+")


def datetime_to_nanos(value: datetime) -> int:
    """Encode an instant as nanoseconds since the epoch. Naive values are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return (value - EPOCH) // timedelta(microseconds=1) * 1000


def nanos_to_datetime(value: int | float) -> datetime:
    """Decode nanoseconds since the epoch into an aware UTC datetime."""
    return EPOCH + timedelta(microseconds=int(value) // 1000)


class DocumentCodec:
    """Stateless converter between ``BaseModel`` entities and search documents.

    Args:
        settings: Serialization options. Defaults to compact output.
    """

    def __init__(self, settings: CodecSettings | None = None) -> None:
        self._settings = settings or CodecSettings()

    # ── String level ─────────────────────────────────────────────────────

    def map_to_string(self, entity: BaseModel) -> str:
        """Serialize an entity to its JSON document text."""
        try:
            data = entity.model_dump(mode="python", by_alias=True)
        except (TypeError, ValueError) as e:
            raise MappingFailure(f"Cannot serialize {type(entity).__name__}: {e}", e) from e
        return self._dumps(data)

    def map_to_object(self, source: str | bytes, target: type[T]) -> T:
        """Parse JSON document text into an instance of ``target``."""
        try:
            data = json.loads(source)
        except (TypeError, ValueError) as e:
            raise MappingFailure(f"Malformed document: {e}", e) from e
        return self.decode(data, target)

    # ── Mapping level ────────────────────────────────────────────────────

    def encode(self, entity: BaseModel) -> dict[str, Any]:
        """Project an entity onto a plain JSON-compatible document."""
        return json.loads(self.map_to_string(entity))

    def decode(self, document: Mapping[str, Any], target: type[T]) -> T:
        """Build an instance of ``target`` from a document, leniently."""
        if not isinstance(document, Mapping):
            error = TypeError(f"expected a JSON object, got {type(document).__name__}")
            raise MappingFailure(f"Cannot decode {target.__name__}: {error}", error) from error
        try:
            return target.model_validate(_prepare(document, target))
        except (TypeError, ValueError, OverflowError) as e:
            # ValidationError is a ValueError
            raise MappingFailure(f"Cannot decode {target.__name__}: {e}", e) from e

    def read_object(self, source: Mapping[str, Any], target: type[T]) -> T:
        """Convert a generic mapping into ``target`` by way of the JSON text form."""
        return self.map_to_object(self._dumps(source), target)

    # ── Helpers ──────────────────────────────────────────────────────────

    def _dumps(self, data: Any) -> str:
        try:
            document = _to_document(data)
            if self._settings.indent_output:
                return json.dumps(document, indent=2, ensure_ascii=False)
            return json.dumps(document, separators=(",", ":"), ensure_ascii=False)
        except (TypeError, ValueError) as e:
            # PydanticSerializationError is a ValueError
            raise MappingFailure(f"Cannot serialize document: {e}", e) from e


def _to_document(value: Any) -> Any:
    """Turn dumped model data into JSON-compatible values, timestamps as nanos."""
    if isinstance(value, datetime):
        return datetime_to_nanos(value)
    if isinstance(value, Mapping):
        return {str(k): _to_document(v) for k, v in value.items()}
    if isinstance(value, _ARRAY_VALUES):
        return [_to_document(v) for v in value]
    if isinstance(value, BaseModel):
        return _to_document(value.model_dump(mode="python", by_alias=True))
    return to_jsonable_python(value)


def _input_key(name: str, field: FieldInfo) -> str:
    if isinstance(field.validation_alias, str):
        return field.validation_alias
    return field.alias or name


def _prepare(data: Mapping[str, Any], model: type[BaseModel]) -> dict[str, Any]:
    """Keep the fields ``model`` knows about and apply the coercion rules to them."""
    prepared: dict[str, Any] = {}
    for name, field in model.model_fields.items():
        key = _input_key(name, field)
        for candidate in dict.fromkeys((key, field.alias, name)):
            if candidate is not None and candidate in data:
                prepared[key] = _coerce(data[candidate], field.annotation)
                break
    return prepared


def _coerce(value: Any, annotation: Any) -> Any:
    if value is None:
        return None

    origin = get_origin(annotation)
    args = get_args(annotation)

    if origin is Annotated:
        return _coerce(value, args[0])

    if origin is Union or origin is types.UnionType:
        members = [a for a in args if a is not type(None)]
        return _coerce(value, members[0]) if len(members) == 1 else value

    if origin in _SEQUENCE_ORIGINS or annotation in _SEQUENCE_ORIGINS:
        if origin is tuple and not (len(args) == 2 and args[1] is Ellipsis):
            return value
        items = list(value) if isinstance(value, _ARRAY_VALUES) else [value]
        item_type = args[0] if args else Any
        return [_coerce(item, item_type) for item in items]

    if origin in _MAPPING_ORIGINS:
        if isinstance(value, Mapping) and len(args) == 2:
            return {k: _coerce(v, args[1]) for k, v in value.items()}
        return value

    if annotation is datetime:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return nanos_to_datetime(value)
        # Some engines return longs as strings
        if isinstance(value, str) and _INTEGER_TEXT.fullmatch(value.strip()):
            return nanos_to_datetime(int(value))
        return value

    if isinstance(annotation, type) and issubclass(annotation, BaseModel) and isinstance(value, Mapping):
        return _prepare(value, annotation)

    return value
