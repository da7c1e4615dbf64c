"""JSON and MessagePack encoding and decoding backed by msgspec.

JSON is used for log lines. Cache payloads use MessagePack so ``bytes``
column values survive a round trip unchanged.
"""

from typing import Any, Literal, overload

import msgspec

from sparrowsql.exceptions import SerializationError

__all__ = ("decode_json", "decode_msgpack", "encode_json", "encode_msgpack")

_encoder = msgspec.json.Encoder(enc_hook=str)
_decoder = msgspec.json.Decoder()
_msgpack_encoder = msgspec.msgpack.Encoder(enc_hook=str)
_msgpack_decoder = msgspec.msgpack.Decoder()


@overload
def encode_json(data: Any, *, as_bytes: Literal[False] = ...) -> str: ...


@overload
def encode_json(data: Any, *, as_bytes: Literal[True]) -> bytes: ...


def encode_json(data: Any, *, as_bytes: bool = False) -> "str | bytes":
    """Encode data to JSON.

    Values msgspec cannot encode natively are rendered with ``str()``.

    Args:
        data: Data to encode.
        as_bytes: Return bytes instead of a decoded string.

    Raises:
        SerializationError: If the payload cannot be encoded.

    Returns:
        JSON string or bytes.
    """
    try:
        encoded = _encoder.encode(data)
    except (TypeError, msgspec.EncodeError) as e:
        msg = f"Unable to encode value as JSON: {e}"
        raise SerializationError(msg) from e
    return encoded if as_bytes else encoded.decode("utf-8")


def decode_json(data: "str | bytes") -> Any:
    """Decode a JSON document.

    Raises:
        SerializationError: If the payload is not valid JSON.
    """
    try:
        return _decoder.decode(data)
    except msgspec.DecodeError as e:
        msg = f"Unable to decode JSON payload: {e}"
        raise SerializationError(msg) from e


def encode_msgpack(data: Any) -> bytes:
    """Encode data to MessagePack, keeping ``bytes`` values as binary.

    Raises:
        SerializationError: If the payload cannot be encoded.
    """
    try:
        return _msgpack_encoder.encode(data)
    except (TypeError, msgspec.EncodeError) as e:
        msg = f"Unable to encode value as MessagePack: {e}"
        raise SerializationError(msg) from e


def decode_msgpack(data: bytes) -> Any:
    """Decode a MessagePack document.

    Raises:
        SerializationError: If the payload is not valid MessagePack.
    """
    try:
        return _msgpack_decoder.decode(data)
    except msgspec.DecodeError as e:
        msg = f"Unable to decode MessagePack payload: {e}"
        raise SerializationError(msg) from e
