# -*- coding: utf-8 -*-
"""
RU: Ключевой материал: SecretKey (байты + тег алгоритма) и фабрика свежих
ключей/IV из CSPRNG.

EN: Key material: the SecretKey value type and KeyMaterialFactory, which
produces fresh keys and IVs from the unified RNG in cipherbox.utils.

Security notes:
- SecretKey.__repr__ never prints key bytes.
- Entropy failures are not recoverable and surface as RuntimeError.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Final, Optional, Union

from cipherbox.transformation import (
    ALGORITHMS,
    DEFAULT_TRANSFORMATION,
    lookup_algorithm,
)
from cipherbox.utils import b64_decode, b64_encode, generate_random_bytes

_LOGGER: Final = logging.getLogger(__name__)

DEFAULT_KEY_ALGORITHM: Final[str] = "AES"
DEFAULT_IV_SIZE: Final[int] = ALGORITHMS[DEFAULT_KEY_ALGORITHM].block_size


@dataclass(frozen=True, repr=False)
class SecretKey:
    """
    Raw symmetric key bytes tagged with the algorithm they belong to.

    The algorithm tag is not validated here; a key tagged for another
    algorithm is rejected by the engine at init time.

    Examples:
        >>> key = SecretKey(b"\\x00" * 16)
        >>> key.algorithm, key.bit_length
        ('AES', 128)
    """

    encoded: bytes
    algorithm: str = DEFAULT_KEY_ALGORITHM

    def __post_init__(self) -> None:
        if not isinstance(self.encoded, (bytes, bytearray, memoryview)):
            raise TypeError(
                f"Key material must be bytes, got {type(self.encoded).__name__}"
            )
        if not isinstance(self.algorithm, str) or not self.algorithm.strip():
            raise ValueError("Key algorithm must be a non-empty string")
        if len(self.encoded) == 0:
            raise ValueError("Key material must not be empty")
        # frozen dataclass: normalize through object.__setattr__
        object.__setattr__(self, "encoded", bytes(self.encoded))
        object.__setattr__(self, "algorithm", self.algorithm.strip())

    @classmethod
    def from_base64(
        cls, text: Union[str, bytes], algorithm: str = DEFAULT_KEY_ALGORITHM
    ) -> "SecretKey":
        """
        Build a key from standard Base64 text.

        Raises:
            DecodingError: on malformed Base64.
            ValueError: if the decoded key is empty.
        """
        return cls(b64_decode(text), algorithm)

    def to_base64(self) -> str:
        return b64_encode(self.encoded)

    @property
    def bit_length(self) -> int:
        return len(self.encoded) * 8

    def __len__(self) -> int:
        return len(self.encoded)

    def __repr__(self) -> str:
        return f"SecretKey(algorithm={self.algorithm!r}, bits={self.bit_length})"


class KeyMaterialFactory:
    """
    Source of fresh key material and of the default transformation.

    Stateless; all methods are static so the class can be swapped for a
    test double by dependency injection.
    """

    __slots__ = ()

    @staticmethod
    def generate_key(
        algorithm: str = DEFAULT_KEY_ALGORITHM, key_size: Optional[int] = None
    ) -> SecretKey:
        """
        Generate a random key for ``algorithm``.

        Args:
            algorithm: Algorithm tag ("AES", "Camellia").
            key_size: Key length in bytes; defaults to the algorithm's default
                strength (32 bytes for AES).

        Raises:
            ValueError: for an unknown algorithm or unsupported key size.
        """
        try:
            spec = lookup_algorithm(algorithm)
        except KeyError as exc:
            raise ValueError(f"Unsupported key algorithm: {algorithm!r}") from exc

        size = spec.default_key_size if key_size is None else key_size
        if size not in spec.key_sizes:
            raise ValueError(
                f"Unsupported {spec.name} key size: {size} bytes, "
                f"expected one of {spec.key_sizes}"
            )

        key = SecretKey(generate_random_bytes(size), spec.name)
        _LOGGER.debug("Generated %d-bit %s key", key.bit_length, spec.name)
        return key

    @staticmethod
    def generate_iv(block_size: int = DEFAULT_IV_SIZE) -> bytes:
        """
        Generate a random IV of ``block_size`` bytes.

        Raises:
            ValueError: if block_size is not positive.
        """
        if not isinstance(block_size, int) or block_size <= 0:
            raise ValueError("IV size must be a positive number of bytes")
        iv = generate_random_bytes(block_size)
        _LOGGER.debug("Generated %d-byte IV", block_size)
        return iv

    @staticmethod
    def default_transformation() -> str:
        """Transformation used when the caller configures none."""
        return DEFAULT_TRANSFORMATION


__all__ = [
    "DEFAULT_KEY_ALGORITHM",
    "DEFAULT_IV_SIZE",
    "SecretKey",
    "KeyMaterialFactory",
]
