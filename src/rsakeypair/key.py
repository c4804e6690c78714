"""The key value type shared by both halves of an RSA key pair.

A public and a private key look exactly alike: an exponent and a modulus. Which one is "public" is purely the
caller's decision.

Typical usage example:

    pub = KeyMaterial(17, 3233)
    pub.is_valid()
    KeyMaterial().is_valid()  # False
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import typing


class KeyMaterial(typing.NamedTuple):
    """One half of an RSA key pair.

    Immutable, compared and hashed by value. Nothing checks that the modulus is a semiprime or that the exponent
    belongs to it; only keys produced by `keygen.create_key_pair` carry that guarantee.

    Attributes:
        exponent: The exponent of the key, whether private or public.
        modulus: The modulus shared by both halves of the pair. Zero marks an invalid key.
    """
    exponent: int = 0
    modulus: int = 0

    def is_valid(self) -> bool:
        """Returns True unless this key has a zero modulus (e.g. the default or a failed parse)."""
        return self.modulus != 0

    @property
    def bsize(self) -> int:
        """Size of the modulus in bytes."""
        return (self.modulus.bit_length() + 7) // 8

    def __str__(self) -> str:
        # Local import, serialization depends on this module.
        from rsakeypair import serialization
        return serialization.to_string(self)
