from __future__ import annotations

import pytest
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.backends.openssl import backend
from cryptography.hazmat.primitives.ciphers import modes

from cipherbox.engine import CipherEngine, Direction
from cipherbox.exceptions import InvalidTransformationError
from cipherbox.keys import SecretKey
from cipherbox.transformation import ALGORITHMS

KEY16 = SecretKey(b"\x00" * 16)
IV16 = b"\x00" * 16

_CAMELLIA_CBC = backend.cipher_supported(
    ALGORITHMS["CAMELLIA"].factory(b"\x00" * 16), modes.CBC(b"\x00" * 16)
)


def test_get_instance_parses_and_validates() -> None:
    engine = CipherEngine.get_instance("aes/cbc/pkcs5padding")
    assert str(engine.transformation) == "AES/CBC/PKCS5Padding"
    assert engine.block_size == 16
    assert engine.direction is None


def test_get_instance_rejects_invalid() -> None:
    with pytest.raises(InvalidTransformationError):
        CipherEngine.get_instance("NOT/A/REAL-CIPHER")


def test_get_instance_rejects_backend_unsupported(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(backend, "cipher_supported", lambda cipher, mode: False)
    with pytest.raises(InvalidTransformationError) as exc_info:
        CipherEngine.get_instance("AES/CBC/PKCS5Padding")
    assert "backend" in exc_info.value.reason


def test_do_final_requires_init() -> None:
    engine = CipherEngine.get_instance("AES/CBC/PKCS5Padding")
    with pytest.raises(RuntimeError):
        engine.do_final(b"data")


def test_engine_reinitializes_between_directions() -> None:
    engine = CipherEngine.get_instance("AES/CBC/PKCS5Padding")

    engine.init(Direction.ENCRYPT, KEY16, IV16)
    ct = engine.do_final(b"hello world")
    assert engine.direction is Direction.ENCRYPT
    assert ct.hex() == "7489adda96bb9c30fb4932e07731571a"

    engine.init("decrypt", KEY16, IV16)
    assert engine.direction is Direction.DECRYPT
    assert engine.do_final(ct) == b"hello world"

    # handle is reusable: encrypt again after decrypt
    engine.init(Direction.ENCRYPT, KEY16, IV16)
    assert engine.do_final(b"hello world") == ct


def test_aes256_reference_vector() -> None:
    engine = CipherEngine.get_instance("AES/CBC/PKCS5Padding")
    engine.init(Direction.ENCRYPT, SecretKey(b"\x01" * 32), b"\x02" * 16)
    assert engine.do_final(b"hello world").hex() == "f563737a376afbed282274255a7fcabd"


@pytest.mark.skipif(not _CAMELLIA_CBC, reason="Camellia not available in OpenSSL build")
def test_camellia_reference_vector() -> None:
    engine = CipherEngine.get_instance("Camellia/CBC/PKCS5Padding")
    engine.init(Direction.ENCRYPT, SecretKey(b"\x00" * 16, "Camellia"), IV16)
    ct = engine.do_final(b"hello world")
    assert ct.hex() == "6c4e480e8ab7b6c9c772ae222b926658"

    engine.init(Direction.DECRYPT, SecretKey(b"\x00" * 16, "camellia"), IV16)
    assert engine.do_final(ct) == b"hello world"


def test_init_rejects_algorithm_mismatch() -> None:
    engine = CipherEngine.get_instance("AES/CBC/PKCS5Padding")
    with pytest.raises(ValueError):
        engine.init(Direction.ENCRYPT, SecretKey(b"\x00" * 16, "Camellia"), IV16)
    assert engine.direction is None


@pytest.mark.parametrize("size", [8, 15, 17, 33])
def test_init_rejects_bad_key_size(size: int) -> None:
    engine = CipherEngine.get_instance("AES/CBC/PKCS5Padding")
    with pytest.raises(ValueError):
        engine.init(Direction.ENCRYPT, SecretKey(b"\x00" * size), IV16)


@pytest.mark.parametrize("size", [0, 8, 12, 32])
def test_init_rejects_bad_cbc_iv(size: int) -> None:
    engine = CipherEngine.get_instance("AES/CBC/PKCS5Padding")
    with pytest.raises(ValueError):
        engine.init(Direction.ENCRYPT, KEY16, b"\x00" * size)


@pytest.mark.parametrize("size", [8, 12, 16, 128])
def test_gcm_accepts_iv_range(size: int) -> None:
    engine = CipherEngine.get_instance("AES/GCM/NoPadding")
    engine.init(Direction.ENCRYPT, KEY16, b"\x00" * size)
    ct = engine.do_final(b"abc")
    engine.init(Direction.DECRYPT, KEY16, b"\x00" * size)
    assert engine.do_final(ct) == b"abc"


@pytest.mark.parametrize("size", [4, 7, 129])
def test_gcm_rejects_iv_out_of_range(size: int) -> None:
    engine = CipherEngine.get_instance("AES/GCM/NoPadding")
    with pytest.raises(ValueError):
        engine.init(Direction.ENCRYPT, KEY16, b"\x00" * size)


def test_gcm_tag_failure_raises_invalid_tag() -> None:
    engine = CipherEngine.get_instance("AES/GCM/NoPadding")
    engine.init(Direction.ENCRYPT, KEY16, b"\x00" * 12)
    ct = bytearray(engine.do_final(b"payload"))
    ct[-1] ^= 0x01

    engine.init(Direction.DECRYPT, KEY16, b"\x00" * 12)
    with pytest.raises(InvalidTag):
        engine.do_final(bytes(ct))


def test_init_type_checks() -> None:
    engine = CipherEngine.get_instance("AES/CBC/PKCS5Padding")
    with pytest.raises(TypeError):
        engine.init(Direction.ENCRYPT, b"\x00" * 16, IV16)  # type: ignore[arg-type]
    with pytest.raises(TypeError):
        engine.init(Direction.ENCRYPT, KEY16, "iv")  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        engine.init("sideways", KEY16, IV16)


def test_padded_buffer_is_wiped(monkeypatch: pytest.MonkeyPatch) -> None:
    wiped = []

    def spy(buf: bytearray) -> None:
        wiped.append(len(buf))
        for i in range(len(buf)):
            buf[i] = 0

    monkeypatch.setattr("cipherbox.engine.zero_memory", spy)
    engine = CipherEngine.get_instance("AES/CBC/PKCS5Padding")
    engine.init(Direction.ENCRYPT, KEY16, IV16)
    engine.do_final(b"hello world")
    assert wiped == [16]


def test_repr_has_no_key_material() -> None:
    engine = CipherEngine.get_instance("AES/CBC/PKCS5Padding")
    engine.init(Direction.ENCRYPT, SecretKey(b"\xab" * 16), IV16)
    text = repr(engine)
    assert "AES/CBC/PKCS5Padding" in text
    assert "encrypt" in text
    assert "ab" * 4 not in text
