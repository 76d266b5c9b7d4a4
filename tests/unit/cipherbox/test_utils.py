# -*- coding: utf-8 -*-
from __future__ import annotations

import os

import pytest

from cipherbox import utils as U
from cipherbox.exceptions import DecodingError


def test_generate_random_bytes_basic_and_bounds() -> None:
    out = U.generate_random_bytes(32)
    assert isinstance(out, bytes) and len(out) == 32
    assert out != U.generate_random_bytes(32)
    for bad in (0, -1, 2 * 1024 * 1024):
        with pytest.raises(ValueError):
            U.generate_random_bytes(bad)
    with pytest.raises(ValueError):
        U.generate_random_bytes(True)  # type: ignore[arg-type]


def test_generate_random_bytes_single_byte() -> None:
    # однобайтовый вывод не считается вырожденным
    assert len(U.generate_random_bytes(1)) == 1


def test_rng_rct_degenerate_all_equal() -> None:
    with pytest.raises(RuntimeError):
        U._rct_apt_checks(b"\x00" * 64)


def test_rng_rct_empty() -> None:
    with pytest.raises(RuntimeError):
        U._rct_apt_checks(b"")


def test_rng_apt_dominance_over_threshold() -> None:
    # 85% одного байта, 15% другого: выше порога 0.80
    with pytest.raises(RuntimeError):
        U._rct_apt_checks(b"\xaa" * 85 + b"\xbb" * 15)


def test_rng_apt_threshold_not_triggered_on_exact_boundary() -> None:
    U._rct_apt_checks(b"\xaa" * 80 + b"\xbb" * 20)


def test_rng_apt_small_sample_skips_check() -> None:
    U._rct_apt_checks(b"\xaa" * 30 + b"\xbb")


def test_b64_round_trip_and_no_newlines() -> None:
    data = os.urandom(300)
    text = U.b64_encode(data)
    assert "\n" not in text
    assert U.b64_decode(text) == data
    assert U.b64_decode(text.encode("ascii")) == data
    assert U.b64_encode(bytearray(b"hi")) == "aGk="


@pytest.mark.parametrize("bad", ["aGk", "aGk=\n", "a Gk=", "aG-k", "aGk=aGk=", "ключ"])
def test_b64_decode_is_strict(bad: str) -> None:
    with pytest.raises(DecodingError) as exc_info:
        U.b64_decode(bad)
    assert isinstance(exc_info.value, ValueError)
    assert exc_info.value.__cause__ is not None


def test_b64_decode_type_error() -> None:
    with pytest.raises(TypeError):
        U.b64_decode(123)  # type: ignore[arg-type]


def test_zero_memory_wipes_bytearray() -> None:
    buf = bytearray(b"supersecret")
    U.zero_memory(buf)
    assert all(b == 0 for b in buf)
    U.zero_memory(None)
    U.zero_memory(b"immutable")  # type: ignore[arg-type]
