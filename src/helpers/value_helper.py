"""
Conversion between plain JSON-like Python values and ``google.protobuf.Value``.

ccxt returns nested dicts/lists of str, float, bool and None; the wire
carries them as ``Value`` messages so that arbitrary shapes survive the
trip without a dedicated schema per endpoint.

Only the canonical ``ListValue.values`` list shape exists in the Python
protobuf runtime, so that is the only list shape accepted on decode.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any, Optional, Union

from google.protobuf import struct_pb2

JsonValue = Union[None, bool, int, float, str, list, dict]


def _fill(target: struct_pb2.Value, value: Any) -> None:
    if value is None:
        target.null_value = struct_pb2.NULL_VALUE
    # bool before numbers, bool is an int subclass
    elif isinstance(value, bool):
        target.bool_value = value
    elif isinstance(value, (int, float)):
        # NaN / Infinity pass through untouched
        target.number_value = value
    elif isinstance(value, str):
        target.string_value = value
    elif isinstance(value, (list, tuple)):
        target.list_value.SetInParent()
        for item in value:
            _fill(target.list_value.values.add(), item)
    elif isinstance(value, Mapping):
        target.struct_value.SetInParent()
        for key, item in value.items():
            _fill(target.struct_value.fields[str(key)], item)
    else:
        raise TypeError(f"Cannot encode value of type {type(value).__name__}")


def encode_value(value: JsonValue) -> struct_pb2.Value:
    """Encode a JSON-like value into a ``google.protobuf.Value``."""
    message = struct_pb2.Value()
    _fill(message, value)
    return message


def decode_value(message: struct_pb2.Value) -> JsonValue:
    """
    Decode a ``google.protobuf.Value`` back into plain Python.

    Integral finite numbers come back as ``int`` so that ccxt params such as
    ``limit`` are not sent as ``100.0``. A value with no kind set is ``None``.
    """
    kind = message.WhichOneof("kind")
    if kind == "number_value":
        number = message.number_value
        if math.isfinite(number) and number.is_integer():
            return int(number)
        return number
    if kind == "string_value":
        return message.string_value
    if kind == "bool_value":
        return message.bool_value
    if kind == "list_value":
        return [decode_value(item) for item in message.list_value.values]
    if kind == "struct_value":
        return {
            key: decode_value(item)
            for key, item in message.struct_value.fields.items()
        }
    return None


def extract_params(wrapper: Optional[Any]) -> Optional[JsonValue]:
    """
    Decode the optional ``Params`` wrapper of a request.

    Returns ``None`` when the wrapper or its ``value`` is absent, meaning
    "no extra parameters". A decoded non-dict is returned as is; the
    upstream call decides what to make of it.
    """
    if wrapper is None or not wrapper.HasField("value"):
        return None
    return decode_value(wrapper.value)
