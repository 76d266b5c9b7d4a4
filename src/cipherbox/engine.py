# -*- coding: utf-8 -*-
"""
Reusable cipher engine handle bound to one transformation.

The handle is created once (validating the transformation against the
OpenSSL backend) and then re-initialized with a direction, key and IV before
every operation, because one handle serves both encryption and decryption.
cryptography's cipher contexts are single-use, so ``do_final`` builds a fresh
context from the stored parameters on each call.

Failures inside ``init``/``do_final`` are raised as the low-level exception
(ValueError, TypeError, cryptography.exceptions.InvalidTag); SymmetricCipherBox
wraps them into EncryptionError/DecryptionError.

Thread-safety:
    Not thread-safe. ``init`` mutates the handle; callers sharing an engine
    must serialize init+do_final pairs.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Dict, Final, Optional, Union

from cryptography.hazmat.backends.openssl import backend as _openssl_backend
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import BlockCipherAlgorithm, Cipher, modes

# CFB and OFB move to the decrepit namespace in newer cryptography releases
try:
    from cryptography.hazmat.decrepit.ciphers.modes import CFB, OFB
except ImportError:
    from cryptography.hazmat.primitives.ciphers.modes import CFB, OFB

from cipherbox.exceptions import InvalidTransformationError
from cipherbox.keys import SecretKey
from cipherbox.transformation import GCM_TAG_SIZE, CipherTransformation, Mode
from cipherbox.utils import zero_memory

_LOGGER: Final = logging.getLogger(__name__)

BytesLike = Union[bytes, bytearray, memoryview]

_MODE_FACTORIES: Final[Dict[Mode, Callable[..., modes.Mode]]] = {
    Mode.CBC: modes.CBC,
    Mode.CFB: CFB,
    Mode.OFB: OFB,
    Mode.CTR: modes.CTR,
    Mode.GCM: modes.GCM,
}

# OpenSSL bounds for GCM IV length, in bytes
_GCM_IV_MIN: Final[int] = 8
_GCM_IV_MAX: Final[int] = 128


class Direction(str, Enum):
    """Operation an engine is initialized for."""

    ENCRYPT = "encrypt"
    DECRYPT = "decrypt"


class CipherEngine:
    """
    Engine handle for a single transformation.

    Examples:
        >>> engine = CipherEngine.get_instance("AES/CBC/PKCS5Padding")
        >>> engine.init(Direction.ENCRYPT, SecretKey(b"\\x00" * 16), b"\\x00" * 16)
        >>> len(engine.do_final(b"hello world"))
        16
    """

    __slots__ = ("_transformation", "_direction", "_key", "_iv")

    def __init__(self, transformation: Union[str, CipherTransformation]) -> None:
        self._transformation = CipherTransformation.parse(transformation)
        self._direction: Optional[Direction] = None
        self._key: Optional[SecretKey] = None
        self._iv: Optional[bytes] = None

    @classmethod
    def get_instance(
        cls, transformation: Union[str, CipherTransformation]
    ) -> "CipherEngine":
        """
        Parse ``transformation`` and check that the backend can run it.

        Raises:
            InvalidTransformationError: if the identifier is malformed, names an
                unsupported algorithm/mode/padding, or the backend lacks it.
        """
        parsed = CipherTransformation.parse(transformation)
        if not _backend_supports(parsed):
            raise InvalidTransformationError(
                str(parsed), "not available in the OpenSSL backend"
            )
        return cls(parsed)

    @property
    def transformation(self) -> CipherTransformation:
        return self._transformation

    @property
    def direction(self) -> Optional[Direction]:
        return self._direction

    @property
    def block_size(self) -> int:
        return self._transformation.block_size

    def init(self, direction: Union[Direction, str], key: SecretKey, iv: BytesLike) -> None:
        """
        Bind direction, key and IV for the next ``do_final``.

        Raises:
            TypeError: if key is not a SecretKey or iv is not bytes-like.
            ValueError: on algorithm mismatch, bad key length or bad IV length.
        """
        direction = Direction(direction)
        if not isinstance(key, SecretKey):
            raise TypeError(f"Key must be a SecretKey, got {type(key).__name__}")
        if not isinstance(iv, (bytes, bytearray, memoryview)):
            raise TypeError(f"IV must be bytes, got {type(iv).__name__}")

        spec = self._transformation.spec
        if key.algorithm.upper() != spec.name.upper():
            raise ValueError(
                f"Key algorithm {key.algorithm} does not match cipher {spec.name}"
            )
        if len(key) not in spec.key_sizes:
            raise ValueError(
                f"Invalid {spec.name} key size: {len(key)} bytes, "
                f"expected one of {spec.key_sizes}"
            )
        self._check_iv_length(len(iv))

        self._direction = direction
        self._key = key
        self._iv = bytes(iv)

    def do_final(self, data: BytesLike) -> bytes:
        """
        Run the bound transform over ``data`` in one shot.

        Raises:
            RuntimeError: if the engine was never initialized.
            ValueError: on bad input length or bad padding.
            cryptography.exceptions.InvalidTag: on GCM authentication failure.
        """
        if self._direction is None or self._key is None or self._iv is None:
            raise RuntimeError("Cipher engine not initialized")

        algorithm = self._transformation.spec.factory(self._key.encoded)
        if self._direction is Direction.ENCRYPT:
            return self._encrypt(algorithm, bytes(data))
        return self._decrypt(algorithm, bytes(data))

    def _check_iv_length(self, size: int) -> None:
        if self._transformation.mode is Mode.GCM:
            if not _GCM_IV_MIN <= size <= _GCM_IV_MAX:
                raise ValueError(
                    f"Invalid GCM IV size: {size} bytes, "
                    f"expected {_GCM_IV_MIN}..{_GCM_IV_MAX}"
                )
        elif size != self.block_size:
            raise ValueError(
                f"Invalid IV size: {size} bytes, expected {self.block_size}"
            )

    def _mode(self, tag: Optional[bytes] = None) -> modes.Mode:
        factory = _MODE_FACTORIES[self._transformation.mode]
        if tag is not None:
            return factory(self._iv, tag)
        return factory(self._iv)

    def _encrypt(self, algorithm: BlockCipherAlgorithm, data: bytes) -> bytes:
        t = self._transformation
        buf = bytearray()
        try:
            if t.is_padded:
                padder = padding.PKCS7(t.block_size * 8).padder()
                buf = bytearray(padder.update(data) + padder.finalize())
            else:
                buf = bytearray(data)
            encryptor = Cipher(algorithm, self._mode()).encryptor()
            out = encryptor.update(buf) + encryptor.finalize()
            if t.is_aead:
                out += encryptor.tag
            return out
        finally:
            zero_memory(buf)

    def _decrypt(self, algorithm: BlockCipherAlgorithm, data: bytes) -> bytes:
        t = self._transformation
        if t.is_aead:
            if len(data) < GCM_TAG_SIZE:
                raise ValueError("Ciphertext shorter than the authentication tag")
            body, tag = data[:-GCM_TAG_SIZE], data[-GCM_TAG_SIZE:]
            decryptor = Cipher(algorithm, self._mode(tag)).decryptor()
            return decryptor.update(body) + decryptor.finalize()

        decryptor = Cipher(algorithm, self._mode()).decryptor()
        buf = bytearray(decryptor.update(data) + decryptor.finalize())
        try:
            if t.is_padded:
                unpadder = padding.PKCS7(t.block_size * 8).unpadder()
                return unpadder.update(bytes(buf)) + unpadder.finalize()
            return bytes(buf)
        finally:
            zero_memory(buf)

    def __repr__(self) -> str:
        direction = self._direction.value if self._direction else None
        return (
            f"{self.__class__.__name__}("
            f"transformation={str(self._transformation)!r}, "
            f"direction={direction!r})"
        )


def _backend_supports(transformation: CipherTransformation) -> bool:
    spec = transformation.spec
    probe_key = b"\x00" * spec.default_key_size
    probe_iv = b"\x00" * spec.block_size
    try:
        cipher = spec.factory(probe_key)
        mode = _MODE_FACTORIES[transformation.mode](probe_iv)
    except (ValueError, TypeError) as exc:
        _LOGGER.debug("Backend probe failed for %s: %s", transformation, exc)
        return False
    return bool(_openssl_backend.cipher_supported(cipher, mode))


__all__ = [
    "Direction",
    "CipherEngine",
]
