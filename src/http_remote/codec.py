"""Tagged JSON wire codec.

Encodes application values as JSON, carrying types JSON cannot represent as
single-key tagged objects::

    {"~#uuid": "5f0e..."}
    {"~#set": [1, 2, 3]}

Map keys that start with ``~`` are escaped with one extra ``~`` so ordinary
data can never be mistaken for a tag. Additional types are supported by
passing ``TypeHandler`` entries keyed by tag.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any
import base64
import json
import uuid

TAG_PREFIX = "~#"
ESCAPE = "~"
DEFAULT_CONTENT_TYPE = "application/json"


class CodecError(ValueError):
    """Raised when a value cannot be encoded or a body cannot be decoded."""


@dataclass(frozen=True)
class TaggedValue:
    """A tagged value whose tag has no registered handler.

    Decoding never loses data for unknown tags; re-encoding a ``TaggedValue``
    produces the original wire form.
    """

    tag: str
    rep: Any


@dataclass(frozen=True)
class TypeHandler:
    """Encode/decode pair for one logical type.

    Attributes:
        type: Python type handled (matched with ``isinstance``)
        encode: Converts an instance into a JSON-compatible representation
        decode: Rebuilds an instance from that representation
    """

    type: type | tuple[type, ...]
    encode: Callable[[Any], Any]
    decode: Callable[[Any], Any]


def _decode_datetime(rep: str) -> datetime:
    return datetime.fromisoformat(rep)


def _decode_date(rep: str) -> date:
    return date.fromisoformat(rep)


# datetime must precede date: datetime is a date subclass.
BUILTIN_HANDLERS: dict[str, TypeHandler] = {
    "uuid": TypeHandler(uuid.UUID, str, uuid.UUID),
    "datetime": TypeHandler(datetime, datetime.isoformat, _decode_datetime),
    "date": TypeHandler(date, date.isoformat, _decode_date),
    "decimal": TypeHandler(Decimal, str, Decimal),
    "set": TypeHandler((set, frozenset), list, set),
    "tuple": TypeHandler(tuple, list, tuple),
    "bytes": TypeHandler(
        bytes,
        lambda value: base64.b64encode(value).decode("ascii"),
        base64.b64decode,
    ),
}


class WireCodec:
    """JSON codec with pluggable tagged-type handlers.

    Args:
        handlers: Extra handlers keyed by tag; they take precedence over the
            built-in handlers for the same tag or type
        content_type: Media type advertised by middleware using this codec

    Example:
        >>> codec = WireCodec()
        >>> codec.decode(codec.encode({"op": "ping", "id": uuid.UUID(int=1)}))
        {'op': 'ping', 'id': UUID('00000000-0000-0000-0000-000000000001')}
    """

    def __init__(
        self,
        handlers: Mapping[str, TypeHandler] | None = None,
        content_type: str = DEFAULT_CONTENT_TYPE,
    ) -> None:
        self.handlers: dict[str, TypeHandler] = dict(handlers or {})
        for tag, handler in BUILTIN_HANDLERS.items():
            self.handlers.setdefault(tag, handler)
        self.content_type = content_type

    def encode(self, value: Any) -> bytes:
        """Encode ``value`` to UTF-8 JSON bytes.

        Raises:
            CodecError: If the value contains an unsupported type
        """
        try:
            return json.dumps(
                self._to_wire(value),
                ensure_ascii=False,
                separators=(",", ":"),
                allow_nan=False,
            ).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise CodecError(f"Cannot encode value: {e}") from e

    def decode(self, data: bytes | str) -> Any:
        """Decode JSON bytes or text back into application values.

        Raises:
            CodecError: If the body is not valid JSON or a tagged value fails
                to decode
        """
        try:
            return json.loads(data, object_hook=self._from_wire_object)
        except (TypeError, ValueError) as e:
            raise CodecError(f"Cannot decode body: {e}") from e

    def _to_wire(self, value: Any) -> Any:
        if value is None or isinstance(value, (bool, int, float, str)):
            return value
        if isinstance(value, TaggedValue):
            return {TAG_PREFIX + value.tag: self._to_wire(value.rep)}
        if isinstance(value, dict):
            return {self._encode_key(k): self._to_wire(v) for k, v in value.items()}
        if isinstance(value, list):
            return [self._to_wire(item) for item in value]

        for tag, handler in self.handlers.items():
            if isinstance(value, handler.type):
                return {TAG_PREFIX + tag: self._to_wire(handler.encode(value))}

        raise TypeError(f"Unsupported type: {type(value).__name__}")

    def _from_wire_object(self, obj: dict[str, Any]) -> Any:
        if len(obj) == 1:
            (key, rep), = obj.items()
            if key.startswith(TAG_PREFIX):
                tag = key[len(TAG_PREFIX) :]
                handler = self.handlers.get(tag)
                if handler is None:
                    return TaggedValue(tag, rep)
                try:
                    return handler.decode(rep)
                except Exception as e:
                    raise CodecError(f"Cannot decode tagged value '{tag}': {e}") from e

        return {self._decode_key(k): v for k, v in obj.items()}

    @staticmethod
    def _encode_key(key: Any) -> str:
        if not isinstance(key, str):
            raise TypeError(f"Map keys must be strings, got {type(key).__name__}")
        if key.startswith(ESCAPE):
            return ESCAPE + key
        return key

    @staticmethod
    def _decode_key(key: str) -> str:
        if key.startswith(ESCAPE + ESCAPE):
            return key[1:]
        return key


default_codec = WireCodec()
