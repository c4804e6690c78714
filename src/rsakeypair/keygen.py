"""Core Key Generation Utility, from random probable primes up to a matching public/private key pair.

Primes are found by sampling random odd numbers of the requested size and running them through trial division and
Miller-Rabin. The public exponent is the first small candidate coprime to the totient, the private exponent its
inverse found with the Extended Euclidean Algorithm.

Every call works on its own random generator: either one built from the caller's seeds, one passed in explicitly,
or a fresh `secrets.SystemRandom`. Nothing here touches a shared generator.

Typical usage example:

    pub, priv = create_key_pair(2048)
    pub, priv = create_key_pair(512, seeds=[4, 8, 15, 16, 23, 42])
    check_prime(3571)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from collections.abc import Sequence
import hashlib
import logging
import math
import random
import secrets
import threading
import warnings

from rsakeypair.errors import GenerationCancelled
from rsakeypair.errors import GenerationError
from rsakeypair.errors import InsecureKeySizeWarning
from rsakeypair.errors import InvalidParameterError
from rsakeypair.key import KeyMaterial

logger = logging.getLogger(__name__)

MINIMUM_KEY_BITS: int = 16
SECURE_KEY_BITS: int = 2048
MAX_GENERATION_ATTEMPTS: int = 8
EXPONENT_SEARCH_START: int = 3

_SMALL_PRIMES: list[int] = []
_SMALL_PRIMES_CAP: int = 0
_MINIMUM_PRIME_SEPARATION: int = 100
_TWO_BIT_EXPONENT_LIMIT: int = 16


def _sieve(n: int = 10000) -> list[int]:
    """Implements the Sieve of Eratosthenes.

    Uses the textbook Sieve of Eratosthenes to generate a set of primes up to `n`.
    Includes memory space optimization and sieving until root.

    Args:
        n: The number up to which to generate primes. Defaults to 10000. Must be >= 0.

    Returns:
        A list of primes up to `n`.
    """
    if n < 2:
        return []
    i_size = (n - 1) // 2
    candidate: list[bool] = [True] * i_size
    for i in range(int(n**0.5) // 2):
        if candidate[i]:
            r = 2 * i + 3
            for j in range((r * r - 3) // 2, i_size, r):
                candidate[j] = False
    result = [2] + [(no * 2 + 3) for no, ele in enumerate(candidate) if ele]
    return result


def get_pre_primes(n: int = 10000, change: bool = False) -> list[int]:
    """Get the small primes, automatically generating if necessary.

    The `_SMALL_PRIMES` list acts as a cache and is only ever replaced, never mutated, so concurrent readers always
    see a complete list. Regeneration occurs if requested range is greater, forced by `change` or cache is empty.

    Args:
        n: The number up to which to generate primes. Defaults to 10000. Must be >= 0.
            Ignored if smaller or equal than `_SMALL_PRIMES_CAP`, `change` is False and `_SMALL_PRIMES` is non-empty.
        change: Whether to force a recomputation of primes. Defaults to False.

    Returns:
        List of primes in ascending order. All primes at least to `n` or more unless `change` is True.

    Raises:
        ValueError: If `n` is negative.
    """
    if n < 0:
        raise ValueError("n must be >= 0")
    global _SMALL_PRIMES
    global _SMALL_PRIMES_CAP
    if n > _SMALL_PRIMES_CAP or change or not _SMALL_PRIMES:
        _SMALL_PRIMES = _sieve(n)
        _SMALL_PRIMES_CAP = n
    return _SMALL_PRIMES


def _trial_division(no: int, n: int = 10000) -> bool:
    """Check the provided `no` against the known small primes.

    Runs a fast pre-check before Miller-Rabin by using modulo division on our known frequent primes.

    Args:
         no: The number to check. Must be integer and non-negative.
         n: The number up to which to generate primes. Defaults to 10000.
           Passed to `get_pre_primes()`, without the `change` argument.

    Returns:
        False if `no` cannot be prime, True otherwise.
    """
    if no < 2:
        return False
    for prime in get_pre_primes(n):
        if prime**2 > no:
            return True
        if no % prime == 0:
            return False
    return True


def _miller_rabin(w: int, iters: int, rng: random.Random | None = None) -> bool:
    """Perform Miller-Rabin primality test.

    Args:
        w: Odd integer to be tested.
        iters: Number of Miller-Rabin iterations to perform.
        rng: Source of the random bases. Defaults to a fresh `secrets.SystemRandom`.

    Returns:
        True if `w` is probably prime, False otherwise.
    """
    if w <= 3:
        return w in (2, 3)
    if w % 2 == 0:
        return False
    rng = rng or secrets.SystemRandom()
    tw = w - 1
    a = (tw & -tw).bit_length() - 1
    m = tw >> a
    for _ in range(iters):
        b = rng.randrange(2, w - 1)
        z = pow(b, m, w)
        if z in (1, tw):
            continue
        for _ in range(1, a):
            z = pow(z, 2, w)
            if z == tw:
                break
            if z == 1:
                return False
        else:
            return False
    return True


def check_prime(candidate: int, iters: None | int = None, n: int = 10000, rng: random.Random | None = None) -> bool:
    """Performs a composite Primality test, using a limited amount of trial divisions, before a Miller-Rabin test.

    Args:
        candidate: The candidate prime to test.
        iters: Number of Miller-Rabin iterations to perform.
            If not provided will use defaults as per the FIPS 186-5 Appendix C.1
        n: The number up to which to generate primes. Defaults to 10000.
            Passed to `_trial_division()`.
        rng: Source of the Miller-Rabin bases. Defaults to a fresh `secrets.SystemRandom`.

    Returns:
        True if `candidate` is probably prime, False otherwise.
    """
    if candidate < 2:
        return False
    if not _trial_division(candidate, n):
        return False
    if iters is None:
        if candidate.bit_length() <= 512:
            iters = 40
        elif candidate.bit_length() <= 1024:
            iters = 56
        elif candidate.bit_length() <= 1536:
            iters = 64
        elif candidate.bit_length() <= 2048:
            iters = 70
        else:
            iters = 74

    return _miller_rabin(candidate, iters, rng)


def _generate_probable_prime(size: int,
                             rng: random.Random,
                             prm_p: int | None = None,
                             cancel: threading.Event | None = None) -> int:
    """Generate a probable prime number of the specified bit size.

    Used for both p and q. For q, candidates too close to p are skipped: equal to it for small primes, within
    `2**(size - 100)` of it once the primes are large enough for that bound to mean anything.

    Args:
        size: The size of the prime to generate in bits. Must be at least 3.
        rng: The random generator to sample candidates from.
        prm_p: The other prime in the pair if this is the second generation.
            Optional, if not provided generates 1st prime.
        cancel: Checked before each candidate, generation stops once it is set.

    Returns:
        A probable prime number of exactly `size` bits.

    Raises:
        GenerationCancelled: If `cancel` was set.
        GenerationError: If generation loops way beyond a reasonable time and a bit.
    """
    ml = 1 if prm_p is None else 2
    rep_cap = size * 5 * ml
    # Set first two bits to 1 to ensure the length of the product, last bit to 1 for oddness.
    msk = (1 << size - 1) | (1 << size - 2) | 1
    for _ in range(rep_cap):
        if cancel is not None and cancel.is_set():
            raise GenerationCancelled("Key generation was cancelled.")
        byts = rng.getrandbits(size) | msk
        if prm_p is not None:
            if size > _MINIMUM_PRIME_SEPARATION and abs(prm_p - byts) <= (1 << (size - _MINIMUM_PRIME_SEPARATION)):
                continue
            if byts == prm_p:
                continue
        if check_prime(byts, rng=rng):
            return byts
    raise GenerationError(
        f"Run an improbable {rep_cap} amount of loops with no prime found. Check system random number generator.")


def generate_primes(bits: int,
                    rng: random.Random | None = None,
                    cancel: threading.Event | None = None) -> tuple[int, int]:
    """Generates a pair of distinct primes whose product has exactly `bits` bits.

    Args:
        bits: The size of the modulus the primes are meant for. Odd sizes give q the extra bit.
        rng: The random generator to sample from. Defaults to a fresh `secrets.SystemRandom`.
        cancel: Checked between prime candidates.

    Returns:
        A pair (p, q) of distinct probable primes.

    Raises:
        InvalidParameterError: If `bits` is below `MINIMUM_KEY_BITS`.
        GenerationError: If no suitable prime turned up within the candidate budget.
    """
    if bits < MINIMUM_KEY_BITS:
        raise InvalidParameterError(f"Size must be at least {MINIMUM_KEY_BITS}.")
    rng = rng or secrets.SystemRandom()
    p = _generate_probable_prime(bits // 2, rng, cancel=cancel)
    q = _generate_probable_prime(bits - bits // 2, rng, p, cancel)
    return p, q


def eea(a: int, b: int) -> tuple[int, int, int]:
    """Implements the Extended Euclidean Algorithm.

    Such a that a*s0 + b*t0 = r0 = gcd(a, b).

    Args:
        a: The first natural number.
        b: The second natural number.

    Returns:
        Greatest common denominator of two integers.
        As well as the Bezout coefficients.
    """
    r0, r1 = a, b
    s0, s1, t0, t1 = 1, 0, 0, 1
    while r1 != 0:
        q = r0 // r1
        r0, r1 = r1, r0 - q * r1
        s0, s1 = s1, s0 - q * s1
        t0, t1 = t1, t0 - q * t1
    return r0, s0, t0


def modular_inverse(a: int, modulus: int) -> int:
    """Finds `d` in `[0, modulus)` with `a * d == 1 (mod modulus)`.

    Raises:
        GenerationError: If `a` has no inverse, i.e. is not coprime to `modulus`.
    """
    g, s, _ = eea(a % modulus, modulus)
    if g != 1:
        raise GenerationError(f"{a} has no inverse modulo {modulus}.")
    return s % modulus


def find_coprime_exponent(totient: int, start: int = EXPONENT_SEARCH_START, max_candidates: int | None = None) -> int:
    """Finds a public exponent coprime to the totient.

    The two-bit values 3, 5, 9, 17, ... 65537 are tried first as they are cheap to exponentiate with, then every
    integer upwards from `start`. Deterministic for a given `totient` and `start`.

    Args:
        totient: The totient of the modulus the exponent is for.
        start: First candidate of the upward scan.
        max_candidates: Bound on the upward scan. Defaults to no bound besides the totient itself, where a coprime
            candidate (`totient - 1`) always exists.

    Returns:
        The first candidate `e` with `1 < e < totient` and `gcd(e, totient) == 1`.

    Raises:
        GenerationError: If no candidate was found.
    """
    if totient < 3:
        raise GenerationError(f"No exponent can be coprime to a totient of {totient}.")
    for k in range(1, _TWO_BIT_EXPONENT_LIMIT + 1):
        e = (1 << k) + 1
        if e >= totient:
            break
        if math.gcd(e, totient) == 1:
            return e
    e = max(start, 2)
    tried = 0
    while e < totient:
        if max_candidates is not None and tried >= max_candidates:
            break
        if math.gcd(e, totient) == 1:
            return e
        e += 1
        tried += 1
    raise GenerationError(f"No exponent coprime to {totient} found from {start} after {tried} candidates.")


def _seeded_rng(seeds: Sequence[int]) -> random.Random:
    """Builds a generator private to one generation, reproducible when seeds are given."""
    if not seeds:
        return secrets.SystemRandom()
    try:
        material = ",".join(str(int(seed)) for seed in seeds)
    except (TypeError, ValueError) as err:
        raise InvalidParameterError("Random seeds must be integers.") from err
    digest = hashlib.sha384(material.encode("ascii")).digest()
    return random.Random(int.from_bytes(digest, byteorder="big"))


def create_key_pair(bits: int,
                    seeds: Sequence[int] = (),
                    rng: random.Random | None = None,
                    max_attempts: int = MAX_GENERATION_ATTEMPTS,
                    cancel: threading.Event | None = None) -> tuple[KeyMaterial, KeyMaterial]:
    """Creates a public/private key pair.

    Each key performs a one-way transform that can only be reversed by the other key. Bigger sizes are more
    secure, but generation takes longer. The whole prime selection is retried up to `max_attempts` times before
    giving up; a partial or zero key pair is never returned.

    Args:
        bits: The size of the modulus in bits, e.g. 2048, 3072, 4096.
        seeds: Optional integers to seed the random generation with. Identical seeds give identical key pairs, so
            provide plenty of unpredictable values if you use them.
        rng: A random generator to use directly instead of one derived from `seeds`.
        max_attempts: How often the whole prime selection is attempted.
        cancel: Checked between prime candidates; once set, generation stops with GenerationCancelled.

    Returns:
        A tuple of (public key, private key) sharing the same modulus.

    Raises:
        InvalidParameterError: If `bits` or `max_attempts` are unusable, or a seed is not an integer.
        GenerationError: If every attempt failed.
        GenerationCancelled: If `cancel` was set.
    """
    if isinstance(bits, bool) or not isinstance(bits, int) or bits < MINIMUM_KEY_BITS:
        raise InvalidParameterError(f"Key size must be an integer of at least {MINIMUM_KEY_BITS} bits, got {bits!r}.")
    if max_attempts < 1:
        raise InvalidParameterError("At least one generation attempt is required.")
    if bits < SECURE_KEY_BITS:
        warnings.warn(f"A {bits} bit key offers no real security. Please use with care.",
                      InsecureKeySizeWarning,
                      stacklevel=2)
    if rng is None:
        rng = _seeded_rng(seeds)
    for attempt in range(1, max_attempts + 1):
        logger.debug("Generating %d bit key pair, attempt %d/%d.", bits, attempt, max_attempts)
        try:
            p, q = generate_primes(bits, rng, cancel)
            modulus = p * q
            totient = (p - 1) * (q - 1)
            e = find_coprime_exponent(totient)
            d = modular_inverse(e, totient)
        except GenerationCancelled:
            logger.debug("Key generation cancelled on attempt %d.", attempt)
            raise
        except GenerationError as err:
            logger.debug("Attempt %d failed: %s", attempt, err)
            continue
        logger.info("Generated %d bit key pair with public exponent %d.", bits, e)
        return KeyMaterial(e, modulus), KeyMaterial(d, modulus)
    raise GenerationError(f"Failed to generate a {bits} bit key pair in {max_attempts} attempts.")
