"""Argument shaping, JSON encoding and typed decoding for OneSky calls.

WHY: Requests carry arguments either in the query string or in a body,
and responses must be turned into caller-chosen types. Both directions
share one naming convention and one date policy, so they live together
in an explicit, immutable Serializer owned by each client rather than in
module-level state.

HOW: normalize_args() turns an argument structure (dataclass, pydantic
model, mapping or sequence of pairs) into an ordered dict of wire keys.
dumps() and format_query_value() encode values for JSON bodies and query
strings. decode() validates raw JSON against any type annotation with a
cached pydantic TypeAdapter; entity models resolve their wire keys
through the same underscore alias generator.

RULES:
- Dataclass fields map to wire keys through the naming strategy; pydantic
  models use their aliases
- None-valued fields are dropped from arguments
- Mapping keys are kept verbatim for queries and run through the naming
  strategy for JSON bodies (process_dictionary_keys)
- Query values use culture-independent formatting: booleans as
  "true"/"false", datetimes per the date policy, None as ""
"""

from __future__ import annotations

import dataclasses
import functools
import json
from collections.abc import Callable, Mapping
from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, TypeAdapter

from onesky.api.models import FileContent
from onesky.naming import to_underscore


@dataclasses.dataclass(frozen=True)
class Serializer:
    """Immutable JSON configuration used by one OneSkyClient.

    Attributes:
        naming: Converts member names and mapping keys to wire keys.
        process_dictionary_keys: Whether mapping keys in JSON bodies are
            converted with ``naming`` too.
        iso_dates: Encode datetimes as ISO 8601 strings; when False they
            are sent as integer Unix seconds. Decoding accepts both.
    """

    naming: Callable[[str], str] = to_underscore
    process_dictionary_keys: bool = True
    iso_dates: bool = True

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def normalize_args(self, args: Any) -> dict[str, Any]:
        """Turn a caller's argument structure into an ordered wire-key dict.

        Always returns a new dict; the caller's object is never mutated.
        """
        if args is None:
            return {}
        if isinstance(args, BaseModel):
            return {
                info.alias or name: value
                for name, info in type(args).model_fields.items()
                if (value := getattr(args, name)) is not None
            }
        if dataclasses.is_dataclass(args) and not isinstance(args, type):
            return {
                self.naming(f.name): value
                for f in dataclasses.fields(args)
                if (value := getattr(args, f.name)) is not None
            }
        if isinstance(args, Mapping):
            return dict(args)
        if isinstance(args, (str, bytes)):
            raise TypeError(f"Unsupported argument structure: {type(args).__name__}")
        return dict(args)

    def to_plain(self, value: Any) -> Any:
        """Convert a value into JSON-compatible primitives."""
        if isinstance(value, FileContent):
            raise TypeError("FileContent cannot be encoded as JSON")
        if isinstance(value, BaseModel) or (
            dataclasses.is_dataclass(value) and not isinstance(value, type)
        ):
            return self.to_plain(self.normalize_args(value))
        if isinstance(value, Mapping):
            return {self._json_key(k): self.to_plain(v) for k, v in value.items()}
        if isinstance(value, (list, tuple, set, frozenset)):
            return [self.to_plain(item) for item in value]
        if isinstance(value, datetime):
            return self._encode_datetime(value)
        if isinstance(value, date):
            return value.isoformat()
        if isinstance(value, Enum):
            return self.to_plain(value.value)
        return value

    def dumps(self, value: Any) -> bytes:
        """Encode a value as a UTF-8 JSON document."""
        return json.dumps(self.to_plain(value), ensure_ascii=False).encode("utf-8")

    def format_query_value(self, value: Any) -> str:
        """Stringify a scalar for the query string, independent of locale."""
        if value is None:
            return ""
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, Enum):
            return self.format_query_value(value.value)
        if isinstance(value, datetime):
            return str(self._encode_datetime(value))
        if isinstance(value, date):
            return value.isoformat()
        return str(value)

    def _json_key(self, key: Any) -> Any:
        if self.process_dictionary_keys and isinstance(key, str):
            return self.naming(key)
        return key

    def _encode_datetime(self, value: datetime) -> str | int:
        if self.iso_dates:
            return value.isoformat()
        return int(value.timestamp())

    # ------------------------------------------------------------------
    # Responses
    # ------------------------------------------------------------------

    def decode(self, data: Any, result_type: Any) -> Any:
        """Validate raw JSON data into an instance of ``result_type``.

        ``None`` or ``Any`` as the type, or a null payload, returns the
        data unchanged. Invalid payloads raise pydantic.ValidationError.
        """
        if result_type is None or result_type is Any or data is None:
            return data
        return _type_adapter(result_type).validate_python(data)


@functools.lru_cache(maxsize=None)
def _type_adapter(result_type: Any) -> TypeAdapter:
    return TypeAdapter(result_type)


DEFAULT_SERIALIZER = Serializer()
