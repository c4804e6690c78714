"""Applies a key to numbers. The same operation encrypts and decrypts, depending only on the key supplied.

This is bare "textbook" RSA: no padding and no checks that the key you apply is the partner of the key that
produced the value. Applying a key that does not match will happily return a meaningless number. It's your
responsibility to check that the result is what you wanted.

Typical usage example:

    pub, priv = create_key_pair(512)
    c = apply(pub, 65).unwrap()
    m = apply(priv, c).unwrap()
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import logging
import typing

from rsakeypair.errors import InvalidKeyError
from rsakeypair.key import KeyMaterial

logger = logging.getLogger(__name__)


def _usable(key: KeyMaterial) -> bool:
    return key.is_valid() and key.modulus > 0 and key.exponent >= 0


class ApplyResult(typing.NamedTuple):
    """Outcome of applying a key.

    Attributes:
        success: False if the key could not be applied (e.g. zero modulus).
        value: The transformed value, or the untouched input on failure.

    A failed result is falsy, so `if apply(key, value):` reads as a success check.
    """
    success: bool
    value: int

    def __bool__(self) -> bool:
        return self.success

    def unwrap(self) -> int:
        """Returns the value, raising instead of quietly handing back the input on failure.

        Raises:
            InvalidKeyError: If the key could not be applied.
        """
        if not self.success:
            raise InvalidKeyError("Key could not be applied, it is not a valid key.")
        return self.value


def apply(key: KeyMaterial, value: int) -> ApplyResult:
    """Performs the core RSA operation on a single block: `value ** exponent mod modulus`.

    The caller must keep `0 <= value < key.modulus`; out of range values are not checked and will not survive the
    round trip.

    Args:
        key: Either half of the key pair.
        value: The int-marshalled block to transform.

    Returns:
        ApplyResult with the transformed block, or with `success` False and the input unchanged if the key is
        invalid (zero modulus, or a negative field).
    """
    if not _usable(key):
        logger.debug("Refusing to apply a key with a zero or negative field.")
        return ApplyResult(False, value)
    return ApplyResult(True, pow(value, key.exponent, key.modulus))


def apply_to_value(key: KeyMaterial, value: int) -> ApplyResult:
    """Applies the key to a value of any size, block by block.

    The value is split into base-modulus digits starting from the least significant one, each digit is run through
    `apply` and pushed onto the result from the most significant end. The digit order therefore comes out reversed,
    which applying the partner key undoes. This matches the block scheme of other implementations of this key
    format, so a value encoded here decodes there.

    A least significant input digit of zero becomes a leading zero of the output and is lost; such values do not
    survive the round trip.

    Args:
        key: Either half of the key pair.
        value: Positive integer to transform.

    Returns:
        ApplyResult with the transformed value, or with `success` False and the input unchanged if the key is
        invalid, has a zero exponent, or the value is not positive.
    """
    if not _usable(key) or key.exponent == 0 or value <= 0:
        logger.debug("Refusing to apply key to value: key usable=%s, value positive=%s", _usable(key), value > 0)
        return ApplyResult(False, value)
    result = 0
    remaining = value
    while remaining:
        remaining, digit = divmod(remaining, key.modulus)
        result = result * key.modulus + pow(digit, key.exponent, key.modulus)
    return ApplyResult(True, result)
