# -*- coding: utf-8 -*-
"""
RU: Закрытая иерархия исключений cipherbox. Одна ветка на каждый вид отказа,
исходная низкоуровневая ошибка всегда доступна через __cause__.

EN: Closed exception hierarchy for cipherbox: one subclass per failure kind,
the original low-level error is always chained as ``__cause__``.

Hierarchy:
    CryptoError
    ├── InvalidTransformationError
    ├── MaterialNotSetError
    │   ├── KeyNotSetError
    │   └── IvNotSetError
    ├── EncryptionError
    ├── DecryptionError
    └── DecodingError (also ValueError)

Guidelines:
- Never put keys, IVs or plaintext fragments into messages or context.
- A failure to build the *default* engine is not a CryptoError; it is raised as
  RuntimeError because it means the package itself is broken.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class CryptoError(Exception):
    """
    Base exception for all cipherbox failures.

    Attributes:
        message: Human readable description (no secrets).
        algorithm: Transformation or algorithm involved, if known.
        context: Extra non-secret diagnostics (sizes, mode names).
    """

    def __init__(
        self,
        message: str = "",
        *,
        algorithm: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.algorithm = algorithm
        self.context = context or {}
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        parts = [self.__class__.__name__, ": ", self.message]

        if self.algorithm:
            parts.append(f" [algorithm={self.algorithm}]")

        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f" ({ctx_str})")

        return "".join(parts)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"algorithm={self.algorithm!r}, "
            f"context={self.context!r})"
        )


class InvalidTransformationError(CryptoError):
    """Raised when a transformation names an unsupported algorithm/mode/padding."""

    def __init__(
        self,
        transformation: str,
        reason: str = "unsupported transformation",
        *,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(
            f"Invalid cipher transformation: {reason}",
            algorithm=transformation,
            cause=cause,
        )
        self.transformation = transformation
        self.reason = reason


class MaterialNotSetError(CryptoError):
    """Raised when decryption is attempted without required key material."""


class KeyNotSetError(MaterialNotSetError):
    """Raised by decrypt() when no secret key has been set or generated."""

    def __init__(self, message: str = "Secret key not set") -> None:
        super().__init__(message)


class IvNotSetError(MaterialNotSetError):
    """Raised by decrypt() when no initialization vector has been set or generated."""

    def __init__(self, message: str = "Initialization vector not set") -> None:
        super().__init__(message)


class EncryptionError(CryptoError):
    """Raised when the cipher primitive rejects an encryption (bad key, bad length)."""


class DecryptionError(CryptoError):
    """Raised when the cipher primitive rejects a decryption (padding, tag, key)."""


class DecodingError(CryptoError, ValueError):
    """Raised on malformed Base64 input or non UTF-8 plaintext."""


__all__ = [
    "CryptoError",
    "InvalidTransformationError",
    "MaterialNotSetError",
    "KeyNotSetError",
    "IvNotSetError",
    "EncryptionError",
    "DecryptionError",
    "DecodingError",
]
