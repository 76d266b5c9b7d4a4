# -*- coding: utf-8 -*-
"""
Cipher transformation identifiers ("ALGORITHM/MODE/PADDING").

A transformation names the block cipher, the chaining mode and the padding
scheme together. Parsing is case-insensitive and normalizes aliases, so
``"aes/cbc/pkcs7padding"`` and ``"AES/CBC/PKCS5Padding"`` are the same value.

Supported:
    Algorithms: AES, Camellia (16-byte block, 128/192/256-bit keys)
    Modes:      CBC, CFB, OFB, CTR, GCM (AES only, NoPadding only)
    Paddings:   PKCS5Padding (alias PKCS7Padding), NoPadding

ECB is deliberately absent: it takes no IV.

Example:
    >>> t = CipherTransformation.parse("aes/gcm/nopadding")
    >>> str(t)
    'AES/GCM/NoPadding'
    >>> t.is_aead
    True
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Final, Optional, Tuple, Union

from cryptography.hazmat.primitives.ciphers import BlockCipherAlgorithm, algorithms

# Camellia moves to the decrepit namespace in newer cryptography releases
try:
    from cryptography.hazmat.decrepit.ciphers.algorithms import Camellia
except ImportError:
    from cryptography.hazmat.primitives.ciphers.algorithms import Camellia

from cipherbox.exceptions import InvalidTransformationError


@dataclass(frozen=True)
class AlgorithmSpec:
    """
    Static properties of a supported block cipher.

    Attributes:
        name: Canonical algorithm tag ("AES").
        block_size: Block length in bytes; also the default IV length.
        key_sizes: Accepted key lengths in bytes.
        default_key_size: Length used when a key is generated.
        factory: Builds the cryptography primitive from raw key bytes.
    """

    name: str
    block_size: int
    key_sizes: Tuple[int, ...]
    default_key_size: int
    factory: Callable[[bytes], BlockCipherAlgorithm]


class Mode(str, Enum):
    """Block chaining modes."""

    CBC = "CBC"
    CFB = "CFB"
    OFB = "OFB"
    CTR = "CTR"
    GCM = "GCM"


class Padding(str, Enum):
    """Padding schemes. PKCS5Padding is PKCS#7 over the cipher block size."""

    PKCS5 = "PKCS5Padding"
    NONE = "NoPadding"


ALGORITHMS: Final[Dict[str, AlgorithmSpec]] = {
    "AES": AlgorithmSpec(
        name="AES",
        block_size=16,
        key_sizes=(16, 24, 32),
        default_key_size=32,
        factory=algorithms.AES,
    ),
    "CAMELLIA": AlgorithmSpec(
        name="Camellia",
        block_size=16,
        key_sizes=(16, 24, 32),
        default_key_size=32,
        factory=Camellia,
    ),
}

_PADDING_ALIASES: Final[Dict[str, Padding]] = {
    "PKCS5PADDING": Padding.PKCS5,
    "PKCS7PADDING": Padding.PKCS5,
    "NOPADDING": Padding.NONE,
}

# AEAD modes authenticate the whole message; only AES has a GCM binding here.
_AEAD_MODES: Final = frozenset({Mode.GCM})
_AEAD_ALGORITHMS: Final = frozenset({"AES"})

DEFAULT_MODE: Final[Mode] = Mode.CBC
DEFAULT_PADDING: Final[Padding] = Padding.PKCS5
DEFAULT_TRANSFORMATION: Final[str] = "AES/CBC/PKCS5Padding"
GCM_TAG_SIZE: Final[int] = 16


def _part_name(part: object) -> str:
    if isinstance(part, Enum):
        return str(part.value)
    return str(part)


def lookup_algorithm(name: str) -> AlgorithmSpec:
    """
    Find the spec of an algorithm by (case-insensitive) name.

    Raises:
        KeyError: if the algorithm is unknown.
    """
    return ALGORITHMS[name.strip().upper()]


@dataclass(frozen=True)
class CipherTransformation:
    """
    Normalized ALGORITHM/MODE/PADDING triple.

    Every instance is validated in ``__post_init__``, whether it comes from
    ``parse`` or is built directly, so an unsupported combination cannot exist.
    Mode and padding may be given as enum members or by name.
    """

    algorithm: str
    mode: Mode
    padding: Padding

    def __post_init__(self) -> None:
        identifier = "/".join(
            _part_name(p) for p in (self.algorithm, self.mode, self.padding)
        )

        try:
            spec = lookup_algorithm(self.algorithm)
        except (KeyError, AttributeError) as exc:
            raise InvalidTransformationError(
                identifier, f"unsupported algorithm {_part_name(self.algorithm)!r}", cause=exc
            ) from exc

        try:
            mode = Mode(_part_name(self.mode).strip().upper())
        except ValueError as exc:
            raise InvalidTransformationError(
                identifier, f"unsupported mode {_part_name(self.mode)!r}", cause=exc
            ) from exc

        padding = _PADDING_ALIASES.get(_part_name(self.padding).strip().upper())
        if padding is None:
            raise InvalidTransformationError(
                identifier, f"unsupported padding {_part_name(self.padding)!r}"
            )

        if mode in _AEAD_MODES:
            if spec.name.upper() not in _AEAD_ALGORITHMS:
                raise InvalidTransformationError(
                    identifier, f"{mode.value} is not available for {spec.name}"
                )
            if padding is not Padding.NONE:
                raise InvalidTransformationError(
                    identifier, f"{mode.value} requires NoPadding"
                )

        # frozen dataclass: normalize through object.__setattr__
        object.__setattr__(self, "algorithm", spec.name)
        object.__setattr__(self, "mode", mode)
        object.__setattr__(self, "padding", padding)

    @classmethod
    def parse(cls, identifier: Union[str, "CipherTransformation"]) -> "CipherTransformation":
        """
        Parse and validate a transformation identifier.

        A bare algorithm name expands to the default mode and padding.

        Raises:
            InvalidTransformationError: on unknown parts or a forbidden combination.
        """
        if isinstance(identifier, CipherTransformation):
            return identifier
        if not isinstance(identifier, str) or not identifier.strip():
            raise InvalidTransformationError(
                repr(identifier), "transformation must be a non-empty string"
            )

        parts = [p.strip() for p in identifier.split("/")]
        if len(parts) == 1:
            parts += [DEFAULT_MODE.value, DEFAULT_PADDING.value]
        if len(parts) != 3 or not all(parts):
            raise InvalidTransformationError(
                identifier, "expected ALGORITHM/MODE/PADDING"
            )

        alg_name, mode_name, padding_name = parts
        return cls(algorithm=alg_name, mode=mode_name, padding=padding_name)  # type: ignore[arg-type]

    @property
    def spec(self) -> AlgorithmSpec:
        return lookup_algorithm(self.algorithm)

    @property
    def block_size(self) -> int:
        return self.spec.block_size

    @property
    def is_aead(self) -> bool:
        return self.mode in _AEAD_MODES

    @property
    def is_padded(self) -> bool:
        return self.padding is Padding.PKCS5

    def check_sizes(self, key_size: Optional[int] = None, iv_size: Optional[int] = None) -> None:
        """
        Check key and IV lengths (bytes) against this transformation.

        ``None`` skips the corresponding check.

        Raises:
            ValueError: if a size is not an int or does not fit.
        """
        if key_size is not None:
            if isinstance(key_size, bool) or not isinstance(key_size, int):
                raise ValueError(f"key_size must be int, got {type(key_size).__name__}")
            if key_size not in self.spec.key_sizes:
                raise ValueError(
                    f"key_size must be one of {self.spec.key_sizes} for {self.algorithm}"
                )
        if iv_size is not None:
            if isinstance(iv_size, bool) or not isinstance(iv_size, int):
                raise ValueError(f"iv_size must be int, got {type(iv_size).__name__}")
            if self.is_aead:
                if not 8 <= iv_size <= 128:
                    raise ValueError(
                        f"iv_size must be between 8 and 128 bytes for {self.mode.value}"
                    )
            elif iv_size != self.block_size:
                raise ValueError(
                    f"iv_size must equal the block size ({self.block_size}) for {self.mode.value}"
                )

    def __str__(self) -> str:
        return f"{self.algorithm}/{self.mode.value}/{self.padding.value}"


__all__ = [
    "AlgorithmSpec",
    "Mode",
    "Padding",
    "ALGORITHMS",
    "DEFAULT_TRANSFORMATION",
    "GCM_TAG_SIZE",
    "CipherTransformation",
    "lookup_algorithm",
]
