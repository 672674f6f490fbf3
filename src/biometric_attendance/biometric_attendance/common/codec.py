"""Binary codec: byte buffers <-> transport-safe strings.

Two schemes are supported because both exist on the wire:

- ``base64``: standard alphabet (``+``/``/``), padded. Spoken by the deployed
  attendance API.
- ``base64url``: URL-safe alphabet (``-``/``_``), unpadded. The WebAuthn
  convention and the default for new deployments.

Decoding is strict: only the canonical encoding of some byte string is
accepted, so ``decode(encode(b)) == b`` and ``encode(decode(s)) == s``.
"""

from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass

from ..core.enums import TransportEncoding
from ..core.exceptions import DecodeError

_STANDARD_RE = re.compile(r"^[A-Za-z0-9+/]*={0,2}$")
_URLSAFE_RE = re.compile(r"^[A-Za-z0-9_-]*$")


@dataclass(frozen=True)
class Base64Codec:
    encoding: TransportEncoding = TransportEncoding.BASE64URL

    def encode(self, data: bytes) -> str:
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError(f"expected bytes, got {type(data).__name__}")
        raw = bytes(data)
        if self.encoding == TransportEncoding.BASE64:
            return base64.b64encode(raw).decode("ascii")
        return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")

    def decode(self, text: str) -> bytes:
        if not isinstance(text, str):
            raise DecodeError(f"expected a {self.encoding.value} string, got {type(text).__name__}")

        if self.encoding == TransportEncoding.BASE64:
            data = self._decode_standard(text)
        else:
            data = self._decode_urlsafe(text)

        # Non-zero trailing bits decode fine but are not canonical.
        if self.encode(data) != text:
            raise DecodeError(f"non-canonical {self.encoding.value} input")
        return data

    def _decode_standard(self, text: str) -> bytes:
        if not _STANDARD_RE.match(text):
            raise DecodeError("invalid base64 character")
        if len(text) % 4:
            raise DecodeError("invalid base64 padding")
        try:
            return base64.b64decode(text, validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecodeError(f"invalid base64 input: {e}") from e

    def _decode_urlsafe(self, text: str) -> bytes:
        if not _URLSAFE_RE.match(text):
            raise DecodeError("invalid base64url character")
        if len(text) % 4 == 1:
            raise DecodeError("invalid base64url length")
        padded = text + "=" * (-len(text) % 4)
        try:
            return base64.urlsafe_b64decode(padded)
        except (binascii.Error, ValueError) as e:
            raise DecodeError(f"invalid base64url input: {e}") from e


BASE64 = Base64Codec(TransportEncoding.BASE64)
BASE64URL = Base64Codec(TransportEncoding.BASE64URL)


def get_codec(encoding: TransportEncoding | str) -> Base64Codec:
    """Codec for a configured scheme name."""
    try:
        scheme = TransportEncoding(encoding)
    except ValueError:
        raise ValueError(f"Unsupported transport encoding: {encoding!r}") from None
    return BASE64 if scheme == TransportEncoding.BASE64 else BASE64URL
