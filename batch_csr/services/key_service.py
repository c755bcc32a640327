# batch_csr/services/key_service.py
"""
Key pair generation for batch CSRs.

Every call produces a brand new key from the OS CSPRNG (via OpenSSL);
nothing is cached, so two CSRs in one batch never share a key.
"""
from dataclasses import dataclass
from typing import Tuple, Union

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from batch_csr.core.enums import KeyType
from batch_csr.core.exceptions import (
    EncodingError,
    KeyGenerationError,
    UnsupportedKeyTypeError,
)
from batch_csr.core.logger import get_service_logger

logger = get_service_logger()

RSA_KEY_SIZES = (2048, 3072, 4096)
RSA_PUBLIC_EXPONENT = 65537

EC_CURVES = {
    "P256": ec.SECP256R1,
    "P384": ec.SECP384R1,
    "P521": ec.SECP521R1,
}


@dataclass(frozen=True)
class RSAKeySpec:
    bits: int

    def __str__(self) -> str:
        return f"RSA-{self.bits}"


@dataclass(frozen=True)
class ECKeySpec:
    curve: str

    def __str__(self) -> str:
        return f"EC-{self.curve}"


KeySpec = Union[RSAKeySpec, ECKeySpec]
PrivateKey = Union[rsa.RSAPrivateKey, ec.EllipticCurvePrivateKey]
PublicKey = Union[rsa.RSAPublicKey, ec.EllipticCurvePublicKey]


_KEY_TYPE_SPECS = {
    KeyType.RSA_2048: RSAKeySpec(2048),
    KeyType.RSA_3072: RSAKeySpec(3072),
    KeyType.RSA_4096: RSAKeySpec(4096),
    KeyType.EC_P256: ECKeySpec("P256"),
    KeyType.EC_P384: ECKeySpec("P384"),
    KeyType.EC_P521: ECKeySpec("P521"),
}


def key_spec_for(key_type) -> KeySpec:
    """Map a KeyType (or its string value) to its key spec."""
    try:
        return _KEY_TYPE_SPECS[KeyType(key_type)]
    except ValueError:
        raise UnsupportedKeyTypeError(key_type)


def check_key_spec(spec: KeySpec) -> None:
    """Reject sizes/curves outside the supported set before any generation."""
    if isinstance(spec, RSAKeySpec):
        if spec.bits not in RSA_KEY_SIZES:
            raise UnsupportedKeyTypeError(spec)
    elif isinstance(spec, ECKeySpec):
        if spec.curve not in EC_CURVES:
            raise UnsupportedKeyTypeError(spec)
    else:
        raise UnsupportedKeyTypeError(spec)


def generate_key_pair(spec: KeySpec) -> Tuple[PublicKey, PrivateKey]:
    """
    Generate a fresh key pair.

    Args:
        spec: RSAKeySpec(bits) or ECKeySpec(curve)

    Returns:
        (public_key, private_key)

    Raises:
        UnsupportedKeyTypeError: spec outside the supported set
        KeyGenerationError: the backend failed to produce a key
    """
    check_key_spec(spec)
    try:
        if isinstance(spec, RSAKeySpec):
            private_key = rsa.generate_private_key(
                public_exponent=RSA_PUBLIC_EXPONENT,
                key_size=spec.bits,
            )
        else:
            private_key = ec.generate_private_key(EC_CURVES[spec.curve]())
    except Exception as e:
        logger.error(f"Key generation failed for {spec}: {e}")
        raise KeyGenerationError(spec, str(e))

    return private_key.public_key(), private_key


def serialize_private_key(private_key: PrivateKey) -> bytes:
    """
    Serialize a private key as unencrypted PKCS#8 PEM ("BEGIN PRIVATE KEY").
    """
    try:
        return private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption()
        )
    except Exception as e:
        raise EncodingError("private key", str(e), field="private_key")


def public_key_der(public_key: PublicKey) -> bytes:
    return public_key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
