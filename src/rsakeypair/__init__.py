"""A bare RSA key pair primitive in an Academic Sense.

Provides generation of matching public/private key pairs, application of either key to a numeric block (the one
operation behind both encryption and decryption) and a compact text format for the keys. No padding is applied,
so this is textbook RSA and not a complete encryption scheme.

Typical usage example:

    pub, priv = create_key_pair(2048)
    c = apply(pub, 65).unwrap()
    m = apply(priv, c).unwrap()
    txt = to_string(pub)
    assert from_string(txt) == pub
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from rsakeypair.codec import apply
from rsakeypair.codec import apply_to_value
from rsakeypair.codec import ApplyResult
from rsakeypair.errors import GenerationCancelled
from rsakeypair.errors import GenerationError
from rsakeypair.errors import InsecureKeySizeWarning
from rsakeypair.errors import InvalidKeyError
from rsakeypair.errors import InvalidParameterError
from rsakeypair.errors import KeyPairError
from rsakeypair.key import KeyMaterial
from rsakeypair.keygen import check_prime
from rsakeypair.keygen import create_key_pair
from rsakeypair.keygen import find_coprime_exponent
from rsakeypair.keygen import generate_primes
from rsakeypair.keygen import modular_inverse
from rsakeypair.serialization import export_key
from rsakeypair.serialization import export_public_key
from rsakeypair.serialization import from_string
from rsakeypair.serialization import import_key
from rsakeypair.serialization import import_public_key
from rsakeypair.serialization import to_string

__version__ = "0.1.0"
__all__ = [
    "KeyMaterial",
    "ApplyResult",
    "apply",
    "apply_to_value",
    "create_key_pair",
    "generate_primes",
    "check_prime",
    "find_coprime_exponent",
    "modular_inverse",
    "to_string",
    "from_string",
    "export_key",
    "import_key",
    "export_public_key",
    "import_public_key",
    "KeyPairError",
    "InvalidParameterError",
    "GenerationError",
    "GenerationCancelled",
    "InvalidKeyError",
    "InsecureKeySizeWarning",
]
