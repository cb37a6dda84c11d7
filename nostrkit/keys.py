"""secp256k1 keys and BIP-340 Schnorr signatures."""

from __future__ import annotations

import hashlib
import secrets
import string

from .utils import hex_to_bytes

_P = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F
_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
_G = (
    0x79BE667EF9DCBBAC55A06295CE870B07029BFCDB2DCE28D959F2815B16F81798,
    0x483ADA7726A3C4655DA4FBFC0E1108A8FD17B448A68554199C47D08FFB10D4B8,
)

_Point = tuple[int, int] | None

_HEXDIGITS = frozenset(string.hexdigits)


def _point_add(a: _Point, b: _Point) -> _Point:
    if a is None:
        return b
    if b is None:
        return a
    if a[0] == b[0] and a[1] != b[1]:
        return None
    if a == b:
        slope = 3 * a[0] * a[0] * pow(2 * a[1], -1, _P) % _P
    else:
        slope = (b[1] - a[1]) * pow(b[0] - a[0], -1, _P) % _P
    x = (slope * slope - a[0] - b[0]) % _P
    return x, (slope * (a[0] - x) - a[1]) % _P


def _point_mul(point: _Point, scalar: int) -> _Point:
    result: _Point = None
    addend = point
    while scalar:
        if scalar & 1:
            result = _point_add(result, addend)
        addend = _point_add(addend, addend)
        scalar >>= 1
    return result


def _lift_x(x: int) -> _Point:
    if x >= _P:
        return None
    c = (pow(x, 3, _P) + 7) % _P
    y = pow(c, (_P + 1) // 4, _P)
    if y * y % _P != c:
        return None
    return x, y if y % 2 == 0 else _P - y


def _tagged_hash(tag: str, msg: bytes) -> bytes:
    tag_hash = hashlib.sha256(tag.encode()).digest()
    return hashlib.sha256(tag_hash + tag_hash + msg).digest()


def _to_bytes(value: int) -> bytes:
    return value.to_bytes(32, "big")


def _secret_scalar(sk: bytes) -> int:
    if len(sk) != 32:
        raise ValueError("secret key must be 32 bytes")
    d = int.from_bytes(sk, "big")
    if not 1 <= d < _N:
        raise ValueError("secret key is out of range")
    return d


def generate_private_key() -> str:
    """Return a fresh random private key as 64 hex characters."""
    while True:
        candidate = secrets.token_bytes(32)
        if 1 <= int.from_bytes(candidate, "big") < _N:
            return candidate.hex()


def get_public_key(sk: str) -> str:
    """Return the x-only public key, as hex, for a hex private key."""
    d = _secret_scalar(hex_to_bytes(sk, 32))
    point = _point_mul(_G, d)
    assert point is not None
    return _to_bytes(point[0]).hex()


def is_valid_public_key_hex(pk: str | None) -> bool:
    """Report whether ``pk`` is 66 hex characters, the size of a compressed key."""
    if pk is None or len(pk) != 66:
        return False
    return all(char in _HEXDIGITS for char in pk)


def is_valid_public_key(pk: str | None) -> bool:
    """Report whether ``pk`` is a valid compressed secp256k1 public key in hex."""
    if not is_valid_public_key_hex(pk):
        return False
    raw = bytes.fromhex(pk)
    if raw[0] not in (0x02, 0x03):
        return False
    return _lift_x(int.from_bytes(raw[1:], "big")) is not None


def schnorr_sign(msg: bytes, sk: bytes, aux_rand: bytes | None = None) -> bytes:
    """Sign a 32-byte message with BIP-340 Schnorr and return the 64-byte signature."""
    if len(msg) != 32:
        raise ValueError("message must be 32 bytes")
    if aux_rand is None:
        aux_rand = secrets.token_bytes(32)
    if len(aux_rand) != 32:
        raise ValueError("auxiliary randomness must be 32 bytes")

    d0 = _secret_scalar(sk)
    pub = _point_mul(_G, d0)
    assert pub is not None
    d = d0 if pub[1] % 2 == 0 else _N - d0
    pub_x = _to_bytes(pub[0])

    mask = _tagged_hash("BIP0340/aux", aux_rand)
    t = bytes(a ^ b for a, b in zip(_to_bytes(d), mask))
    k0 = int.from_bytes(_tagged_hash("BIP0340/nonce", t + pub_x + msg), "big") % _N
    if k0 == 0:
        raise ValueError("signing failed: zero nonce")

    r = _point_mul(_G, k0)
    assert r is not None
    k = k0 if r[1] % 2 == 0 else _N - k0
    r_x = _to_bytes(r[0])
    e = int.from_bytes(_tagged_hash("BIP0340/challenge", r_x + pub_x + msg), "big") % _N
    signature = r_x + _to_bytes((k + e * d) % _N)

    if not schnorr_verify(msg, pub_x, signature):
        raise ValueError("signing failed: produced signature does not verify")
    return signature


def schnorr_verify(msg: bytes, pubkey: bytes, sig: bytes) -> bool:
    """Verify a BIP-340 Schnorr signature against an x-only public key."""
    if len(pubkey) != 32 or len(sig) != 64:
        return False
    pub = _lift_x(int.from_bytes(pubkey, "big"))
    if pub is None:
        return False
    r = int.from_bytes(sig[:32], "big")
    s = int.from_bytes(sig[32:], "big")
    if r >= _P or s >= _N:
        return False
    e = int.from_bytes(_tagged_hash("BIP0340/challenge", sig[:32] + pubkey + msg), "big") % _N
    point = _point_add(_point_mul(_G, s), _point_mul(pub, _N - e))
    if point is None or point[1] % 2 != 0:
        return False
    return point[0] == r