# pylint: disable=missing-module-docstring,redefined-outer-name
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import binascii

from cryptography.hazmat.primitives import serialization as crypto_serialization
from cryptography.hazmat.primitives.asymmetric import rsa
import pytest

from rsakeypair import codec
from rsakeypair import create_key_pair
from rsakeypair import KeyMaterial
from rsakeypair import serialization
from rsakeypair.errors import InvalidKeyError

malformed_strings = [
    "",
    ",",
    "11",
    "11,",
    ",ca1",
    "11,ca1,5",
    "11,,ca1",
    "zz,ca1",
    "11,cag",
    "-11,ca1",
    "11,+ca1",
    "0x11,ca1",
    "11 ,ca1",
    "11, ca1",
    "1_1,ca1",
    "11;ca1",
    "11\n,ca1",
    "١١,ca1",  # Non-ASCII digits, which int() would otherwise accept.
]


@pytest.fixture(scope="module")
def generated_pair() -> tuple[KeyMaterial, KeyMaterial]:
    return create_key_pair(1024, seeds=[31, 41, 59, 26, 53])


@pytest.fixture(scope="module")
def crypto_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


def test_to_string_known(toy_pair):
    pub, priv = toy_pair
    assert serialization.to_string(pub) == "11,ca1"
    assert serialization.to_string(priv) == "ac1,ca1"


def test_to_string_canonical(generated_pair):
    for key in generated_pair:
        txt = serialization.to_string(key)
        assert txt == txt.strip()
        assert txt == txt.lower()
        assert txt.count(serialization.SEPARATOR) == 1


def test_str_matches_to_string(toy_pair):
    assert str(toy_pair[0]) == serialization.to_string(toy_pair[0])


def test_from_string_known(toy_pair):
    assert serialization.from_string("11,ca1") == toy_pair[0]
    assert serialization.from_string("AC1,CA1") == toy_pair[1]
    assert serialization.from_string("00011,0ca1") == toy_pair[0]


def test_from_string_surrounding_whitespace(toy_pair):
    assert serialization.from_string("  11,ca1\n") == toy_pair[0]


def test_round_trip(toy_pair, generated_pair):
    for key in toy_pair + generated_pair + (KeyMaterial(0, 1), KeyMaterial(2**4096 + 1, 2**4099 - 1)):
        assert serialization.from_string(serialization.to_string(key)) == key


@pytest.mark.parametrize("text", malformed_strings)
def test_from_string_malformed(text):
    key = serialization.from_string(text)
    assert key == KeyMaterial()
    assert not key.is_valid()


@pytest.mark.parametrize("text", [None, b"11,ca1", 0x11, ["11", "ca1"]])
def test_from_string_not_text(text):
    assert not serialization.from_string(text).is_valid()


def test_from_string_zero_modulus():
    assert not serialization.from_string("11,0").is_valid()


def test_public_export(generated_pair, tmp_path):
    pub = generated_pair[0]
    des = tmp_path / "testkey.pub"
    serialization.export_public_key(pub, des)
    with open(des, "rb") as fi:
        interkey = crypto_serialization.load_pem_public_key(fi.read())
    assert interkey.public_numbers().n == pub.modulus
    assert interkey.public_numbers().e == pub.exponent


def test_public_import(crypto_key, tmp_path):
    pubs = crypto_key.public_key().public_numbers()
    src = tmp_path / "crypto.pub"
    with open(src, "wb") as fo:
        fo.write(crypto_key.public_key().public_bytes(crypto_serialization.Encoding.PEM,
                                                      crypto_serialization.PublicFormat.PKCS1))
    key = serialization.import_public_key(src)
    assert key == KeyMaterial(pubs.e, pubs.n)


def test_imported_public_key_interoperates(crypto_key, tmp_path):
    src = tmp_path / "crypto.pub"
    with open(src, "wb") as fo:
        fo.write(crypto_key.public_key().public_bytes(crypto_serialization.Encoding.PEM,
                                                      crypto_serialization.PublicFormat.PKCS1))
    pub = serialization.import_public_key(src)
    priv = KeyMaterial(crypto_key.private_numbers().d, pub.modulus)
    assert codec.apply(priv, codec.apply(pub, 17092025).value).value == 17092025


def test_key_export_import_round(generated_pair, tmp_path):
    for num, key in enumerate(generated_pair):
        des = tmp_path / f"key_{num}"
        serialization.export_key(key, des)
        assert serialization.import_key(des) == key


@pytest.mark.parametrize("key", [KeyMaterial(), KeyMaterial(17, 0), KeyMaterial(-17, 3233)])
def test_export_refuses_invalid(key, tmp_path):
    with pytest.raises(InvalidKeyError):
        serialization.export_key(key, tmp_path / "key")
    with pytest.raises(InvalidKeyError):
        serialization.export_public_key(key, tmp_path / "key.pub")
    assert not (tmp_path / "key").exists()


def test_import_wrong_type(toy_pair, tmp_path):
    des = tmp_path / "key.pub"
    serialization.export_public_key(toy_pair[0], des)
    with pytest.raises(IOError):
        serialization.import_key(des)


def test_import_validates_der(tmp_path):
    des = tmp_path / "key"
    serialization.write_pem(des, "KEY_MATERIAL", b"Definitely not DER.")
    with pytest.raises(IOError):
        serialization.import_key(des)


def test_import_validates_trailing(toy_pair, tmp_path):
    src, des = tmp_path / "key", tmp_path / "key_trailing"
    serialization.export_key(toy_pair[0], src)
    serialization.write_pem(des, "KEY_MATERIAL", serialization.read_pem(src, "KEY_MATERIAL") + b"\x00\x00")
    with pytest.raises(IOError, match="trailing"):
        serialization.import_key(des)


def test_import_validates_modulus(tmp_path):
    keydata = serialization.KeyMaterialInfo()
    keydata["exponent"] = 17
    keydata["modulus"] = 0
    des = tmp_path / "key"
    serialization.write_pem(des, "KEY_MATERIAL", serialization.encoder.encode(keydata))
    with pytest.raises(IOError, match="unusable"):
        serialization.import_key(des)


@pytest.mark.parametrize("payload", [b"", b"Quick!", b"A" * 64, b"\x00\xff" * 100])
def test_pem_read_write(payload, tmp_path):
    pld = tmp_path / "testpem.pem"
    serialization.write_pem(pld, "KEY_MATERIAL", payload)
    res = serialization.read_pem(pld, "KEY_MATERIAL")
    assert res == payload


def test_pem_read_validates_subtype(tmp_path):
    pld = tmp_path / "testpem.pem"
    with open(pld, "w", encoding="ascii") as fi:
        fi.write("-----BEGIN GARBAGE DATA-----\n")
        fi.write("This is a thesis on the legality of... hm... legality of what?\n")
        fi.write("-----END RSA PUBLIC KEY-----\n")
    with pytest.raises(IOError):
        serialization.read_pem(pld, "PKCS1_PUB")


def test_pem_read_validates_end(tmp_path):
    pld = tmp_path / "testpem.pem"
    with open(pld, "w", encoding="ascii") as fi:
        fi.write("-----BEGIN RSA KEY MATERIAL-----\n")
        fi.write("Does the carpet?\n")
        fi.write("\n" * 80)
        fi.write("Bye now.")
    with pytest.raises(IOError):
        serialization.read_pem(pld, "KEY_MATERIAL")


def test_pem_read_nonbase64(tmp_path):
    pld = tmp_path / "testpem.pem"
    with open(pld, "w", encoding="ascii") as fi:
        fi.write("-----BEGIN RSA PUBLIC KEY-----\n")
        fi.write("woah woah woah\n")
        fi.write("I wonder what happens if I-\n")
        fi.write("-----END RSA PUBLIC KEY-----\n")
    with pytest.raises(binascii.Error):
        serialization.read_pem(pld, "PKCS1_PUB")
