"""
cipherbox: symmetric encryption helper with lazily generated key material.

EN: Top-level API. SymmetricCipherBox holds a key, an IV and a cipher engine
bound to an ALGORITHM/MODE/PADDING transformation (AES/CBC/PKCS5Padding by
default) and exposes byte and Base64 text encrypt/decrypt.

Example:
    >>> from cipherbox import SymmetricCipherBox
    >>> box = SymmetricCipherBox()
    >>> token = box.encrypt_to_text("hello world")
    >>> box.decrypt_from_text(token)
    'hello world'
"""

from .cipher_box import BoxState, SymmetricCipherBox
from .config import CipherConfig, CipherProfile
from .engine import CipherEngine, Direction
from .exceptions import (
    CryptoError,
    DecodingError,
    DecryptionError,
    EncryptionError,
    InvalidTransformationError,
    IvNotSetError,
    KeyNotSetError,
    MaterialNotSetError,
)
from .keys import KeyMaterialFactory, SecretKey
from .transformation import DEFAULT_TRANSFORMATION, CipherTransformation

__all__ = [
    # Core
    "SymmetricCipherBox",
    "BoxState",
    "KeyMaterialFactory",
    "SecretKey",
    # Engine
    "CipherEngine",
    "CipherTransformation",
    "Direction",
    "DEFAULT_TRANSFORMATION",
    # Configuration
    "CipherConfig",
    "CipherProfile",
    # Errors
    "CryptoError",
    "InvalidTransformationError",
    "MaterialNotSetError",
    "KeyNotSetError",
    "IvNotSetError",
    "EncryptionError",
    "DecryptionError",
    "DecodingError",
]

__version__ = "1.0.0"
