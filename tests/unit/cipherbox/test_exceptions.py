from __future__ import annotations

import pytest

from cipherbox.exceptions import (
    CryptoError,
    DecodingError,
    DecryptionError,
    EncryptionError,
    InvalidTransformationError,
    IvNotSetError,
    KeyNotSetError,
    MaterialNotSetError,
)


class TestCryptoError:
    def test_basic_initialization(self) -> None:
        error = CryptoError("Test error message")
        assert error.message == "Test error message"
        assert error.algorithm is None
        assert error.context == {}
        assert error.__cause__ is None

    def test_str_with_algorithm_and_context(self) -> None:
        error = EncryptionError(
            "Encryption failed",
            algorithm="AES/CBC/PKCS5Padding",
            context={"reason": "ValueError"},
        )
        assert str(error) == (
            "EncryptionError: Encryption failed "
            "[algorithm=AES/CBC/PKCS5Padding] (reason=ValueError)"
        )

    def test_repr(self) -> None:
        error = DecryptionError("bad", algorithm="AES/GCM/NoPadding")
        assert repr(error) == (
            "DecryptionError(message='bad', algorithm='AES/GCM/NoPadding', context={})"
        )

    def test_cause_is_chained(self) -> None:
        root = ValueError("Invalid padding bytes.")
        error = DecryptionError("Decryption failed", cause=root)
        assert error.__cause__ is root


@pytest.mark.parametrize(
    "exc_type",
    [
        InvalidTransformationError,
        MaterialNotSetError,
        KeyNotSetError,
        IvNotSetError,
        EncryptionError,
        DecryptionError,
        DecodingError,
    ],
)
def test_hierarchy(exc_type: type) -> None:
    assert issubclass(exc_type, CryptoError)


def test_material_errors_share_base() -> None:
    assert issubclass(KeyNotSetError, MaterialNotSetError)
    assert issubclass(IvNotSetError, MaterialNotSetError)
    assert str(KeyNotSetError()) == "KeyNotSetError: Secret key not set"
    assert str(IvNotSetError()) == "IvNotSetError: Initialization vector not set"


def test_decoding_error_is_value_error() -> None:
    with pytest.raises(ValueError):
        raise DecodingError("Malformed Base64 input")


def test_invalid_transformation_fields() -> None:
    cause = KeyError("FOO")
    error = InvalidTransformationError("FOO/CBC/NoPadding", "unsupported algorithm 'FOO'", cause=cause)
    assert error.transformation == "FOO/CBC/NoPadding"
    assert error.reason == "unsupported algorithm 'FOO'"
    assert error.algorithm == "FOO/CBC/NoPadding"
    assert error.__cause__ is cause
    assert "unsupported algorithm" in str(error)


def test_encryption_and_decryption_are_distinct() -> None:
    assert not issubclass(EncryptionError, DecryptionError)
    assert not issubclass(DecryptionError, EncryptionError)
