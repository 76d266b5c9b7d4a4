# -*- coding: utf-8 -*-
"""
RU: SymmetricCipherBox: ключ, IV и движок шифра с ленивой генерацией
материала при шифровании и строгой проверкой при расшифровании.

EN: SymmetricCipherBox holds a secret key, an IV and a cipher engine handle.

Lifecycle:
- All fields start unset.
- encrypt() generates whatever is missing (key, IV, default engine) and keeps
  it, so later calls on the same box reuse one key+IV pair.
- decrypt() never generates material: a missing key raises KeyNotSetError, a
  missing IV raises IvNotSetError. Decrypting under a random key is meaningless.
- The engine is re-initialized with direction+key+IV on every call.

Errors:
- InvalidTransformationError from set_transformation(), raised eagerly.
- EncryptionError / DecryptionError wrap the primitive's failure (__cause__).
- DecodingError for malformed Base64 or non UTF-8 plaintext in the text helpers.
- RuntimeError if the built-in default transformation cannot be constructed.

Thread-safety:
- Not thread-safe. Lazy generation is check-then-act; callers sharing a box
  across threads must serialize access externally.

Security notes:
- Keys, IVs and plaintext are never logged; repr() shows only what is set.
- Reusing one key+IV pair across GCM encryptions leaks the authentication key;
  use a fresh box (or set a new IV) per GCM message.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Final, Optional, Type, Union

from cipherbox.engine import CipherEngine, Direction
from cipherbox.exceptions import (
    DecodingError,
    DecryptionError,
    EncryptionError,
    InvalidTransformationError,
    IvNotSetError,
    KeyNotSetError,
)
from cipherbox.keys import DEFAULT_IV_SIZE, DEFAULT_KEY_ALGORITHM, KeyMaterialFactory, SecretKey
from cipherbox.transformation import DEFAULT_TRANSFORMATION, CipherTransformation
from cipherbox.utils import b64_decode, b64_encode

if TYPE_CHECKING:
    from cipherbox.config import CipherConfig

_LOGGER: Final = logging.getLogger(__name__)

BytesLike = Union[bytes, bytearray, memoryview]


class BoxState(str, Enum):
    """Observable configuration state of a SymmetricCipherBox."""

    UNCONFIGURED = "unconfigured"  # neither key nor IV
    PARTIAL = "partial"  # only one of key / IV
    READY = "ready"  # key and IV present


class SymmetricCipherBox:
    """
    Symmetric encrypt/decrypt helper with lazily generated key material.

    Examples:
        >>> box = SymmetricCipherBox()
        >>> token = box.encrypt_to_text("hello world")
        >>> box.decrypt_from_text(token)
        'hello world'

        >>> other = SymmetricCipherBox()
        >>> other.set_key_from_base64(box.base64_key)
        >>> other.set_iv_from_base64(box.base64_iv)
        >>> other.decrypt_from_text(token)
        'hello world'
    """

    __slots__ = ("_key", "_iv", "_engine", "_key_factory", "_key_size", "_iv_size")

    def __init__(
        self,
        key: Union[SecretKey, BytesLike, None] = None,
        iv: Optional[BytesLike] = None,
        transformation: Union[str, CipherTransformation, None] = None,
        *,
        key_size: Optional[int] = None,
        iv_size: Optional[int] = None,
        key_factory: Union[KeyMaterialFactory, Type[KeyMaterialFactory], None] = None,
    ) -> None:
        """
        Args:
            key: Initial key; raw bytes are tagged with the default algorithm.
            iv: Initial IV.
            transformation: Bound eagerly; see set_transformation().
            key_size: Length of lazily generated keys (algorithm default if None).
            iv_size: Length of lazily generated IVs (block size if None).
            key_factory: Source of fresh material, KeyMaterialFactory by default.

        Raises:
            InvalidTransformationError: if ``transformation`` is not supported.
            ValueError: if ``key_size`` or ``iv_size`` does not fit the bound
                transformation (the default one when none is given).
        """
        self._key: Optional[SecretKey] = None
        self._iv: Optional[bytes] = None
        self._engine: Optional[CipherEngine] = None
        self._key_factory = key_factory if key_factory is not None else KeyMaterialFactory
        self._key_size = key_size
        self._iv_size = iv_size

        if transformation is not None:
            self.set_transformation(transformation)
        self._check_sizes()
        if key is not None:
            self.set_key(key)
        if iv is not None:
            self.set_iv(iv)

    @classmethod
    def from_config(cls, config: "CipherConfig") -> "SymmetricCipherBox":
        """Build a box whose engine and generated sizes follow ``config``."""
        return cls(
            transformation=config.transformation,
            key_size=config.key_size,
            iv_size=config.iv_size,
        )

    # ------------------------------------------------------------------
    # Key material
    # ------------------------------------------------------------------

    @property
    def key(self) -> Optional[SecretKey]:
        return self._key

    def set_key(self, key: Union[SecretKey, BytesLike, None]) -> None:
        """
        Replace the secret key. Affects later operations only.

        Raw bytes are tagged with the engine's algorithm (AES if none is bound).
        ``None`` clears the key so the next encrypt() generates a fresh one.
        """
        if key is None or isinstance(key, SecretKey):
            self._key = key
        elif isinstance(key, (bytes, bytearray, memoryview)):
            self._key = SecretKey(bytes(key), self._default_algorithm())
        else:
            raise TypeError(f"Key must be SecretKey or bytes, got {type(key).__name__}")

    def set_key_from_base64(
        self, text: Union[str, bytes], algorithm: Optional[str] = None
    ) -> None:
        """
        Decode a standard Base64 key and install it.

        Raises:
            DecodingError: on malformed Base64.
        """
        self._key = SecretKey.from_base64(text, algorithm or self._default_algorithm())

    @property
    def base64_key(self) -> Optional[str]:
        return self._key.to_base64() if self._key is not None else None

    @property
    def iv(self) -> Optional[bytes]:
        return self._iv

    def set_iv(self, iv: Optional[BytesLike]) -> None:
        """Replace the IV; ``None`` clears it."""
        if iv is not None and not isinstance(iv, (bytes, bytearray, memoryview)):
            raise TypeError(f"IV must be bytes, got {type(iv).__name__}")
        self._iv = bytes(iv) if iv is not None else None

    def set_iv_from_base64(self, text: Union[str, bytes]) -> None:
        """
        Decode a standard Base64 IV and install it.

        Raises:
            DecodingError: on malformed Base64.
        """
        self._iv = b64_decode(text)

    @property
    def base64_iv(self) -> Optional[str]:
        return b64_encode(self._iv) if self._iv is not None else None

    # ------------------------------------------------------------------
    # Engine
    # ------------------------------------------------------------------

    @property
    def engine(self) -> Optional[CipherEngine]:
        return self._engine

    def set_engine(self, engine: Optional[CipherEngine]) -> None:
        """Install a pre-built engine handle; ``None`` restores the lazy default."""
        if engine is not None and not isinstance(engine, CipherEngine):
            raise TypeError(f"Engine must be CipherEngine, got {type(engine).__name__}")
        self._engine = engine

    @property
    def transformation(self) -> Optional[CipherTransformation]:
        return self._engine.transformation if self._engine is not None else None

    def set_transformation(self, transformation: Union[str, CipherTransformation]) -> None:
        """
        Bind a new engine for ``transformation``.

        Existing key and IV are kept as they are, even if they no longer fit
        the new transformation; such a mismatch surfaces on the next call.

        Raises:
            InvalidTransformationError: if the transformation is unsupported.
        """
        try:
            engine = CipherEngine.get_instance(transformation)
        except InvalidTransformationError:
            _LOGGER.warning("Rejected cipher transformation %r", str(transformation))
            raise

        if self._engine is not None and (self._key is not None or self._iv is not None):
            _LOGGER.warning(
                "Cipher transformation changed from %s to %s with key material already set",
                self._engine.transformation,
                engine.transformation,
            )
        self._engine = engine
        _LOGGER.debug("Cipher transformation set to %s", engine.transformation)

    @property
    def state(self) -> BoxState:
        if self._key is not None and self._iv is not None:
            return BoxState.READY
        if self._key is None and self._iv is None:
            return BoxState.UNCONFIGURED
        return BoxState.PARTIAL

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def encrypt(self, plaintext: BytesLike) -> bytes:
        """
        Encrypt ``plaintext``, generating key, IV and engine if missing.

        Raises:
            TypeError: if plaintext is not bytes-like.
            EncryptionError: if the primitive rejects the operation.
        """
        _check_bytes("plaintext", plaintext)

        engine = self._ensure_engine()
        try:
            # sizes are checked at construction; a later engine switch may not fit them
            engine.transformation.check_sizes(self._key_size, self._iv_size)
        except ValueError as exc:
            _LOGGER.error("Encryption failed: %s", exc.__class__.__name__)
            raise EncryptionError(
                "Configured key or IV size does not fit the cipher",
                algorithm=str(engine.transformation),
                context={"reason": exc.__class__.__name__},
                cause=exc,
            ) from exc

        if self._key is None:
            self._key = self._key_factory.generate_key(
                self._default_algorithm(), self._key_size
            )
            _LOGGER.debug("Secret key generated for %s", self._key.algorithm)
        if self._iv is None:
            self._iv = self._key_factory.generate_iv(self._default_iv_size())
            _LOGGER.debug("Initialization vector generated (%d bytes)", len(self._iv))

        try:
            engine.init(Direction.ENCRYPT, self._key, self._iv)
            ciphertext = engine.do_final(plaintext)
        except Exception as exc:
            _LOGGER.error("Encryption failed: %s", exc.__class__.__name__)
            raise EncryptionError(
                "Encryption failed",
                algorithm=str(engine.transformation),
                context={"reason": exc.__class__.__name__},
                cause=exc,
            ) from exc

        _LOGGER.debug(
            "Encryption successful (%d -> %d bytes)", len(plaintext), len(ciphertext)
        )
        return ciphertext

    def decrypt(self, ciphertext: BytesLike) -> bytes:
        """
        Decrypt ``ciphertext`` with the current key and IV.

        Raises:
            TypeError: if ciphertext is not bytes-like.
            KeyNotSetError: if no key is set.
            IvNotSetError: if no IV is set.
            DecryptionError: on bad padding, failed authentication or bad key.
        """
        _check_bytes("ciphertext", ciphertext)

        if self._key is None:
            raise KeyNotSetError()
        if self._iv is None:
            raise IvNotSetError()
        engine = self._ensure_engine()

        try:
            engine.init(Direction.DECRYPT, self._key, self._iv)
            plaintext = engine.do_final(ciphertext)
        except Exception as exc:
            _LOGGER.warning("Decryption failed: %s", exc.__class__.__name__)
            raise DecryptionError(
                "Decryption failed",
                algorithm=str(engine.transformation),
                context={"reason": exc.__class__.__name__},
                cause=exc,
            ) from exc

        _LOGGER.debug(
            "Decryption successful (%d -> %d bytes)", len(ciphertext), len(plaintext)
        )
        return plaintext

    def encrypt_to_text(self, text: str) -> str:
        """
        UTF-8 encode, encrypt and Base64-encode ``text``.

        Raises:
            EncryptionError: if encryption fails.
            DecodingError: if ``text`` cannot be encoded as UTF-8.
        """
        if not isinstance(text, str):
            raise TypeError(f"text must be str, got {type(text).__name__}")
        try:
            data = text.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise DecodingError("Text is not encodable as UTF-8", cause=exc) from exc
        return b64_encode(self.encrypt(data))

    def decrypt_from_text(self, text: Union[str, bytes]) -> str:
        """
        Base64-decode, decrypt and UTF-8 decode ``text``.

        Raises:
            DecodingError: on malformed Base64 or non UTF-8 plaintext.
            KeyNotSetError, IvNotSetError, DecryptionError: as decrypt().
        """
        plaintext = self.decrypt(b64_decode(text))
        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodingError(
                "Decrypted data is not valid UTF-8",
                context={"length": len(plaintext)},
                cause=exc,
            ) from exc

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _ensure_engine(self) -> CipherEngine:
        if self._engine is None:
            default = self._key_factory.default_transformation()
            try:
                self._engine = CipherEngine.get_instance(default)
            except InvalidTransformationError as exc:
                _LOGGER.error("Default cipher transformation %s is unavailable", default)
                raise RuntimeError(
                    f"Default cipher transformation {default} cannot be constructed"
                ) from exc
            _LOGGER.debug("Default cipher engine created for %s", default)
        return self._engine

    def _check_sizes(self) -> None:
        if self._engine is not None:
            transformation = self._engine.transformation
        else:
            transformation = CipherTransformation.parse(DEFAULT_TRANSFORMATION)
        transformation.check_sizes(self._key_size, self._iv_size)

    def _default_algorithm(self) -> str:
        if self._engine is not None:
            return self._engine.transformation.algorithm
        return DEFAULT_KEY_ALGORITHM

    def _default_iv_size(self) -> int:
        if self._iv_size is not None:
            return self._iv_size
        if self._engine is not None:
            return self._engine.block_size
        return DEFAULT_IV_SIZE

    def __repr__(self) -> str:
        transformation = str(self.transformation) if self._engine is not None else None
        return (
            f"{self.__class__.__name__}("
            f"transformation={transformation!r}, "
            f"state={self.state.value!r})"
        )


def _check_bytes(name: str, value: object) -> None:
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise TypeError(f"{name} must be bytes, got {type(value).__name__}")


__all__ = [
    "BoxState",
    "SymmetricCipherBox",
]
