# -*- coding: utf-8 -*-
"""
RU: Утилиты: RNG через HKDF-микширование двух источников, санити-проверки
энтропии, строгие кодеки Base64 и best-effort зануление буферов.

EN: Helpers shared by the key factory and the cipher box: CSPRNG output mixed
through HKDF, entropy sanity checks, strict Base64 codecs and best-effort wiping.
"""
from __future__ import annotations

import base64
import logging
import os
import secrets
from collections import Counter
from typing import Final, Optional, Union

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from cipherbox.exceptions import DecodingError

_LOGGER: Final = logging.getLogger(__name__)

_MAX_RANDOM_BYTES: Final[int] = 1024 * 1024
_SMALL_APT_MIN_N: Final[int] = 32
_APT_MAX_PROPORTION: Final[float] = 0.80
_HKDF_INFO: Final[bytes] = b"CIPHERBOX-RNG-v1"


def generate_random_bytes(n: int) -> bytes:
    """
    Generate cryptographically secure random bytes.

    Two independent reads of the OS CSPRNG (os.urandom and secrets.token_bytes)
    are XOR-ed and mixed via HKDF-SHA256.

    Args:
        n: number of bytes to generate (1..1MiB).

    Returns:
        Random bytes of requested length.

    Raises:
        ValueError: if n is out of range.
        RuntimeError: if the output fails the sanity checks (broken entropy source).
    """
    if not isinstance(n, int) or isinstance(n, bool) or n <= 0 or n > _MAX_RANDOM_BYTES:
        raise ValueError("Requested random size must be in 1..1MiB")

    src1 = os.urandom(n)
    src2 = secrets.token_bytes(n)
    ikm = bytes(a ^ b for a, b in zip(src1, src2))
    hkdf = HKDF(algorithm=hashes.SHA256(), length=n, salt=src2[:16], info=_HKDF_INFO)
    out = hkdf.derive(ikm)

    _rct_apt_checks(out)

    _LOGGER.debug("Generated %d random bytes", n)
    return out


def _rct_apt_checks(data: bytes) -> None:
    """
    Repetition Count Test (RCT) and Adaptive Proportion Test (APT) sanity checks.

    Raises:
        RuntimeError: if data fails the checks.
    """
    if not data:
        raise RuntimeError("Empty data for entropy checks")
    if len(data) > 1 and all(b == data[0] for b in data):
        raise RuntimeError("Degenerate RNG output (all bytes equal)")
    if len(data) >= _SMALL_APT_MIN_N:
        freq: Counter[int] = Counter(data)
        max_prop = max(freq.values()) / float(len(data))
        if max_prop > _APT_MAX_PROPORTION:
            raise RuntimeError("RNG output fails adaptive proportion sanity check")


def b64_encode(data: Union[bytes, bytearray]) -> str:
    """
    Encode bytes to a standard Base64 ASCII string (RFC 4648, no newlines).
    """
    return base64.b64encode(bytes(data)).decode("ascii")


def b64_decode(text: Union[str, bytes]) -> bytes:
    """
    Strictly decode standard Base64.

    Raises:
        DecodingError: on characters outside the alphabet, bad padding or
            non-ASCII input.
    """
    if isinstance(text, str):
        try:
            raw = text.encode("ascii")
        except UnicodeEncodeError as exc:
            raise DecodingError("Base64 input must be ASCII", cause=exc) from exc
    elif isinstance(text, (bytes, bytearray)):
        raw = bytes(text)
    else:
        raise TypeError(f"Base64 input must be str or bytes, got {type(text).__name__}")

    try:
        return base64.b64decode(raw, validate=True)
    except ValueError as exc:
        raise DecodingError(
            "Malformed Base64 input", context={"length": len(raw)}, cause=exc
        ) from exc


def zero_memory(buf: Optional[bytearray]) -> None:
    """
    Best-effort zeroization of a mutable buffer.

    Only bytearray can be wiped; Python bytes are immutable and ignored.
    """
    if buf is None or not isinstance(buf, bytearray):
        return
    for i in range(len(buf)):
        buf[i] = 0


__all__ = [
    "generate_random_bytes",
    "b64_encode",
    "b64_decode",
    "zero_memory",
]
