"""Canonical JSON encoding and decoding of bundle documents."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import IO, Any

from pydantic_core import PydanticSerializationError

from .errors import DecodeError, EncodeError
from .models import WIRE_CONTEXT, Bundle

__all__ = [
    "decode",
    "encode",
    "load_file",
    "parse_reader",
    "unmarshal",
    "write_file",
    "write_to",
]

logger = logging.getLogger(__name__)


def _canonical_dumps(data: Any) -> bytes:
    """Sorted keys, no insignificant whitespace, UTF-8, no NaN/Infinity."""
    return json.dumps(
        data,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    ).encode("utf-8")


def encode(bundle: Bundle) -> bytes:
    """
    Serialize *bundle* to its canonical JSON bytes.

    The same logical document always yields the same bytes.  Raises
    ``EncodeError`` when a value (typically something in ``custom``) has no
    JSON representation.
    """
    try:
        data = bundle.model_dump(mode="json", by_alias=True)
        encoded = _canonical_dumps(data)
    except (PydanticSerializationError, TypeError, ValueError) as exc:
        raise EncodeError(f"cannot encode bundle {bundle.name!r}: {exc}") from exc
    logger.debug("Encoded bundle %s (%d bytes)", bundle.name, len(encoded))
    return encoded


def decode(data: bytes | str) -> Bundle:
    """
    Parse a bundle document from JSON.

    Raises ``DecodeError`` for malformed JSON, a non-object document, or
    content that does not fit the bundle schema.
    """
    try:
        raw = json.loads(data)
    except (RecursionError, ValueError) as exc:
        raise DecodeError(f"malformed bundle document: {exc}") from exc
    if not isinstance(raw, dict):
        raise DecodeError(
            f"bundle document must be a JSON object, got {type(raw).__name__}"
        )
    try:
        bundle = Bundle.model_validate(raw, context={WIRE_CONTEXT: True})
    except ValueError as exc:
        raise DecodeError(f"invalid bundle document: {exc}") from exc
    logger.debug("Decoded bundle %s %s", bundle.name, bundle.version)
    return bundle


def unmarshal(data: bytes | str) -> Bundle:
    """Decode a bundle that was not signed."""
    return decode(data)


def parse_reader(reader: IO[Any]) -> Bundle:
    """Decode a bundle from an open binary or text file object."""
    return decode(reader.read())


def load_file(path: str | os.PathLike[str]) -> Bundle:
    """Read and decode the bundle file at *path*."""
    return decode(Path(path).read_bytes())


def write_to(bundle: Bundle, writer: IO[bytes]) -> int:
    """Write the canonical encoding of *bundle* to *writer*; return the byte count."""
    return writer.write(encode(bundle))


def write_file(
    bundle: Bundle, dest: str | os.PathLike[str], mode: int = 0o644
) -> None:
    """Write the canonical encoding of *bundle* to *dest* with permissions *mode*."""
    data = encode(bundle)
    path = Path(dest)
    path.write_bytes(data)
    os.chmod(path, mode)
    logger.debug("Wrote bundle %s to %s", bundle.name, path)
