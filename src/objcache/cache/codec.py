"""
Object codec: typed values to JSON bytes and back.

Encoding uses orjson, which natively handles dataclasses, datetimes, UUIDs
and enums. orjson writes NaN and infinities as ``null``, so values holding
them are rejected rather than stored in a form that cannot be read back.
Decoding validates the stored JSON into the requested type with a pydantic
TypeAdapter in strict mode, so the caller's ``as_type`` is the only place
type safety is enforced and values are never coerced into it.
"""

from __future__ import annotations

import dataclasses
import math
from functools import lru_cache
from typing import Any, TypeVar

import orjson
from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from objcache.exceptions import DecodingError, EncodingError

T = TypeVar("T")


def _default(obj: Any) -> Any:
    """Serialize types orjson does not handle on its own."""
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    if isinstance(obj, (set, frozenset)):
        return list(obj)
    raise TypeError(f"Type is not serializable: {type(obj).__name__}")


def _has_non_finite(obj: Any) -> bool:
    """Return True if ``obj`` holds a NaN or infinite float anywhere."""
    if isinstance(obj, float):
        return not math.isfinite(obj)
    if isinstance(obj, dict):
        return any(_has_non_finite(v) for v in obj.values())
    if isinstance(obj, (list, tuple, set, frozenset)):
        return any(_has_non_finite(v) for v in obj)
    if isinstance(obj, BaseModel):
        return any(_has_non_finite(getattr(obj, name)) for name in type(obj).model_fields)
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return any(_has_non_finite(getattr(obj, f.name)) for f in dataclasses.fields(obj))
    return False


@lru_cache(maxsize=256)
def _adapter_for(as_type: Any) -> TypeAdapter[Any]:
    return TypeAdapter(as_type)


class ObjectCodec:
    """Converts values to bytes and bytes to values of a requested type."""

    def encode(self, obj: Any) -> bytes:
        """Serialize ``obj`` to JSON bytes.

        Raises:
            EncodingError: If the value contains data JSON cannot represent,
                including NaN and infinite floats.
        """
        try:
            data = orjson.dumps(obj, default=_default)
        except (orjson.JSONEncodeError, TypeError, ValueError) as e:
            raise EncodingError(
                f"Failed to encode value: {e}",
                context={"type": type(obj).__name__},
            ) from e

        # Non-finite floats only ever surface as null.
        if b"null" in data and _has_non_finite(obj):
            raise EncodingError(
                "Failed to encode value: NaN and infinite floats are not valid JSON",
                context={"type": type(obj).__name__},
            )
        return data

    def decode(self, data: bytes, as_type: type[T]) -> T:
        """Validate JSON ``data`` strictly as ``as_type``.

        Raises:
            DecodingError: If the bytes are not JSON or do not fit ``as_type``.
        """
        try:
            adapter = _adapter_for(as_type)
        except TypeError:
            # Unhashable type expressions skip the adapter cache.
            adapter = TypeAdapter(as_type)

        try:
            return adapter.validate_json(data, strict=True)
        except PydanticValidationError as e:
            if any(err["type"] == "json_invalid" for err in e.errors()):
                raise DecodingError(
                    "Stored bytes are not valid JSON",
                    context={"as_type": _type_name(as_type)},
                ) from e
            raise DecodingError(
                f"Stored value does not match requested type: {e.error_count()} error(s)",
                context={"as_type": _type_name(as_type)},
            ) from e


def _type_name(as_type: Any) -> str:
    return getattr(as_type, "__name__", None) or repr(as_type)
