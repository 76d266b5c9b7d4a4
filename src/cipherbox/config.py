# -*- coding: utf-8 -*-
"""
RU: Конфигурация шифрования: именованные профили и чтение из окружения.
EN: Cipher box configuration with predefined profiles and environment loading.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Final, Mapping, Optional

from cipherbox.transformation import DEFAULT_TRANSFORMATION, CipherTransformation

ENV_PREFIX: Final[str] = "CIPHERBOX_"


class CipherProfile(str, Enum):
    """Predefined parameter sets."""

    # AES-256-CBC with PKCS#7 padding (default)
    DEFAULT = "default"

    # AES-128-CBC, for peers limited to 128-bit keys
    COMPAT_128 = "compat-128"

    # AES-256-GCM with a 96-bit IV
    AEAD = "aead"


@dataclass(frozen=True)
class CipherConfig:
    """
    Cipher box configuration record.

    Attributes:
        transformation: ALGORITHM/MODE/PADDING identifier, normalized on creation.
        key_size: Length in bytes of generated keys.
        iv_size: Length in bytes of generated IVs.

    Examples:
        >>> CipherConfig.from_profile(CipherProfile.AEAD).transformation
        'AES/GCM/NoPadding'

        >>> CipherConfig(transformation="aes/cbc/pkcs7padding").transformation
        'AES/CBC/PKCS5Padding'
    """

    transformation: str = DEFAULT_TRANSFORMATION
    key_size: int = 32
    iv_size: int = 16

    def __post_init__(self) -> None:
        """Normalize the transformation and validate sizes against it."""
        parsed = CipherTransformation.parse(self.transformation)
        object.__setattr__(self, "transformation", str(parsed))

        parsed.check_sizes(self.key_size, self.iv_size)

    @property
    def parsed_transformation(self) -> CipherTransformation:
        return CipherTransformation.parse(self.transformation)

    @staticmethod
    def from_profile(profile: CipherProfile) -> "CipherConfig":
        """Configuration for a predefined profile."""
        return _PROFILE_PARAMS[CipherProfile(profile)]

    @classmethod
    def from_env(
        cls,
        prefix: str = ENV_PREFIX,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "CipherConfig":
        """
        Read configuration from environment variables.

        Recognized: ``{prefix}PROFILE``, ``{prefix}TRANSFORMATION``,
        ``{prefix}KEY_SIZE``, ``{prefix}IV_SIZE``. A profile supplies the base
        values; the explicit variables override it.

        Raises:
            ValueError: on unknown profile or non-integer sizes.
            InvalidTransformationError: on a bad transformation.
        """
        env = os.environ if environ is None else environ
        profile_name = env.get(f"{prefix}PROFILE")
        base = (
            cls.from_profile(CipherProfile(profile_name.strip().lower()))
            if profile_name
            else cls()
        )

        transformation = env.get(f"{prefix}TRANSFORMATION", base.transformation)
        key_size = _int_from_env(env, f"{prefix}KEY_SIZE", base.key_size)
        iv_size = _int_from_env(env, f"{prefix}IV_SIZE", base.iv_size)
        return cls(transformation=transformation, key_size=key_size, iv_size=iv_size)


def _int_from_env(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


_PROFILE_PARAMS: Final[dict[CipherProfile, CipherConfig]] = {
    CipherProfile.DEFAULT: CipherConfig(),
    CipherProfile.COMPAT_128: CipherConfig(key_size=16),
    CipherProfile.AEAD: CipherConfig(
        transformation="AES/GCM/NoPadding",
        key_size=32,
        iv_size=12,
    ),
}


__all__ = [
    "ENV_PREFIX",
    "CipherProfile",
    "CipherConfig",
]
