"""Converts keys to and from text, plus PEM files for keeping them around.

The text format is the two numbers and nothing else: `<hex exponent>,<hex modulus>`. Parsing it is lenient, a
malformed string gives back an invalid key (check with `KeyMaterial.is_valid()`) instead of raising.

The PEM files are stricter and raise IOError on anything they do not recognise. Public halves can be written as
PKCS#1 for use with other RSA tooling; any half (private halves carry no primes here, so PKCS#8 is out of the
question) can be written with our own minimal wrapper.

Typical usage example:

    txt = to_string(pub)
    pub = from_string(txt)
    export_public_key(pub, pathlib.Path("key.pub"))
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import base64
import pathlib
import re

from pyasn1 import error
from pyasn1.codec.der import decoder
from pyasn1.codec.der import encoder
from pyasn1.codec.native import encoder as localize
from pyasn1.type import namedtype
from pyasn1.type import univ
from pyasn1_modules import rfc8017

from rsakeypair.errors import InvalidKeyError
from rsakeypair.key import KeyMaterial

SEPARATOR = ","

PEM_TYPES = {
    "PKCS1_PUB": ("-----BEGIN RSA PUBLIC KEY-----", "-----END RSA PUBLIC KEY-----"),
    "KEY_MATERIAL": ("-----BEGIN RSA KEY MATERIAL-----", "-----END RSA KEY MATERIAL-----"),
}

_HEX_DIGITS = re.compile(r"[0-9a-fA-F]+")


class KeyMaterialInfo(univ.Sequence):
    """No standard structure holds a bare exponent and modulus without calling it public, so we make our own!"""
    componentType = namedtype.NamedTypes(
        namedtype.NamedType("exponent", univ.Integer()),
        namedtype.NamedType("modulus", univ.Integer()),
    )


def to_string(key: KeyMaterial) -> str:
    """Turns the key into its text representation, in lower case hex."""
    return f"{key.exponent:x}{SEPARATOR}{key.modulus:x}"


def from_string(text: str) -> KeyMaterial:
    """Loads a key from the text created by `to_string`.

    Surrounding whitespace is ignored and hex digits may be of either case. Anything else out of place (a missing
    or extra separator, signs, prefixes, non-hex characters) gives the invalid default key rather than an error.

    Args:
        text: The text representation of the key.

    Returns:
        The parsed key, or `KeyMaterial()` if the text is malformed.
    """
    if not isinstance(text, str):
        return KeyMaterial()
    tokens = text.strip().split(SEPARATOR)
    if len(tokens) != 2 or not all(_HEX_DIGITS.fullmatch(token) for token in tokens):
        return KeyMaterial()
    return KeyMaterial(int(tokens[0], 16), int(tokens[1], 16))


def export_public_key(key: KeyMaterial, file: pathlib.Path) -> None:
    """Export a key to file as a PKCS1 RSA public key.

    Args:
        key: The key to export, meant to be the public half.
        file: The file to export the key to.

    Raises:
        InvalidKeyError: If the key is not valid.
    """
    _check_exportable(key)
    keydata = rfc8017.RSAPublicKey()
    keydata["modulus"] = key.modulus
    keydata["publicExponent"] = key.exponent
    write_pem(file, "PKCS1_PUB", encoder.encode(keydata))


def import_public_key(file: pathlib.Path) -> KeyMaterial:
    """Import a PKCS1 RSA public key from file.

    Args:
        file: The file to import the key from.

    Returns:
        The imported key.

    Raises:
        IOError: If the file does not hold a PKCS1 public key.
    """
    pykeyd = _decode(read_pem(file, "PKCS1_PUB"), rfc8017.RSAPublicKey())
    return _checked_key(pykeyd["publicExponent"], pykeyd["modulus"])


def export_key(key: KeyMaterial, file: pathlib.Path) -> None:
    """Export either half of a key pair to file.

    Args:
        key: The key to export.
        file: The file to export the key to.

    Raises:
        InvalidKeyError: If the key is not valid.
    """
    _check_exportable(key)
    keydata = KeyMaterialInfo()
    keydata["exponent"] = key.exponent
    keydata["modulus"] = key.modulus
    write_pem(file, "KEY_MATERIAL", encoder.encode(keydata))


def import_key(file: pathlib.Path) -> KeyMaterial:
    """Import a key written by `export_key`.

    Args:
        file: The file to import the key from.

    Returns:
        The imported key.

    Raises:
        IOError: If the file does not hold an exported key.
    """
    pykeyd = _decode(read_pem(file, "KEY_MATERIAL"), KeyMaterialInfo())
    return _checked_key(pykeyd["exponent"], pykeyd["modulus"])


def _check_exportable(key: KeyMaterial) -> None:
    if not key.is_valid() or key.exponent < 0 or key.modulus < 0:
        raise InvalidKeyError("Only valid keys can be exported.")


def _decode(payload: bytes, structure: univ.Sequence) -> dict:
    """DER-decodes the payload against `structure` into native python values."""
    try:
        keydata, rest = decoder.decode(payload, asn1Spec=structure)
    except error.PyAsn1Error as err:
        raise IOError("Key data is not valid DER for this key type.") from err
    if rest:
        raise IOError("Unexpected trailing data after key.")
    return localize.encode(keydata)


def _checked_key(exponent: int, modulus: int) -> KeyMaterial:
    if exponent < 0 or modulus <= 0:
        raise IOError("Key file holds an unusable key.")
    return KeyMaterial(exponent, modulus)


def read_pem(file: pathlib.Path, subtype: str) -> bytes:
    """Reads a PEM encoded file.

    Args:
        file: The file to read.
        subtype: The subtype of PEM encoding to accept.

    Returns:
        The decoded PEM encoded file.

    Raises:
        IOError: If the file has invalid PEM encoding.
        binascii.Error: If the body is not base64.
    """
    curr_type = PEM_TYPES[subtype]
    with open(file, "r", encoding="ascii") as f:
        headline = f.readline().strip()
        if headline != curr_type[0]:
            raise IOError(f"PEM Headline {headline} does not match {curr_type[0]}")
        parcel = []
        while True:
            line = f.readline().strip()
            if not line:
                raise IOError(f"PEM File does not contain footer: {curr_type[1]}")
            if line == curr_type[1]:
                break
            parcel.append(line)
    return base64.b64decode("".join(parcel))


def write_pem(file: pathlib.Path, subtype: str, data: bytes) -> None:
    """Writes a PEM encoded file.

    Args:
        file: The file to write.
        subtype: The subtype of PEM encoding to write.
        data: The data to write.
    """
    curr_type = PEM_TYPES[subtype]
    payload = base64.b64encode(data).decode()
    with open(file, "w", encoding="ascii") as f:
        f.write(curr_type[0] + "\n")
        res = "\n".join(payload[i:i + 64] for i in range(0, len(payload), 64))
        res += "\n" if res else ""
        f.write(res)
        f.write(curr_type[1] + "\n")
