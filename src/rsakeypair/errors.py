"""Exceptions and warnings raised by the key pair primitive.

Malformed key text is deliberately absent here: `serialization.from_string` never raises, it hands back an invalid
key instead.
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0


class KeyPairError(Exception):
    """Base class for every error raised by rsakeypair."""


class InvalidParameterError(KeyPairError, ValueError):
    """A generation parameter was refused before any work began."""


class GenerationError(KeyPairError, RuntimeError):
    """Prime, exponent or inverse search exhausted its attempt budget."""


class GenerationCancelled(GenerationError):
    """Key generation was cancelled by the caller between candidate trials."""


class InvalidKeyError(KeyPairError, ValueError):
    """A key with a zero modulus was used where a usable key is required."""


class InsecureKeySizeWarning(RuntimeWarning):
    """Issued when generating a key pair too small for any real security."""
