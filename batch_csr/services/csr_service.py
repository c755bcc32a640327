# batch_csr/services/csr_service.py
"""
CSR Builder Service - PKCS#10 requests for batch generation

Flow per CN:
1. Generate a fresh key pair (key_service)
2. Build the request: subject in template order, optional SAN extension request
3. Self-sign with the requested hash (MatchIssuer signs with the configured default)
4. Emit CSR and PKCS#8 private key as PEM text

The optional unique ID never enters the request; it travels on the record.
"""

from asn1crypto import core as asn1_core, csr as asn1_csr
from cryptography import x509
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa
from cryptography.hazmat.primitives import hashes, serialization
from dataclasses import dataclass
from typing import Optional

from batch_csr.core.config import MATCH_ISSUER_DEFAULT_HASH
from batch_csr.core.enums import SignHashAlg
from batch_csr.core.exceptions import (
    EncodingError,
    SigningError,
    UnsupportedHashAlgorithmError,
)
from batch_csr.core.logger import get_service_logger
from batch_csr.services.key_service import (
    KeySpec,
    PrivateKey,
    generate_key_pair,
    public_key_der,
    serialize_private_key,
)
from batch_csr.services.san_service import SANSpec
from batch_csr.services.subject_service import RenderedSubject

logger = get_service_logger()


@dataclass(frozen=True)
class CSRArtifacts:
    csr_pem: str
    key_pem: str
    unique_id: Optional[str] = None


def _concrete_hash(hash_alg: SignHashAlg) -> hashes.HashAlgorithm:
    if hash_alg is SignHashAlg.SHA256:
        return hashes.SHA256()
    if hash_alg is SignHashAlg.SHA384:
        return hashes.SHA384()
    if hash_alg is SignHashAlg.SHA512:
        return hashes.SHA512()
    if hash_alg is SignHashAlg.SHA1:
        return hashes.SHA1()
    raise UnsupportedHashAlgorithmError(hash_alg)


def resolve_sign_hash(hash_alg) -> hashes.HashAlgorithm:
    """
    Pick the hash used to sign the request.

    MatchIssuer is only a tag for the issuing CA; the request itself is
    signed with MATCH_ISSUER_DEFAULT_HASH.
    """
    try:
        hash_alg = SignHashAlg(hash_alg)
    except ValueError:
        raise UnsupportedHashAlgorithmError(hash_alg)

    if hash_alg is SignHashAlg.MATCH_ISSUER:
        try:
            default = SignHashAlg(MATCH_ISSUER_DEFAULT_HASH)
        except ValueError:
            default = None
        if default is None or not default.is_concrete:
            raise UnsupportedHashAlgorithmError(
                hash_alg, f"MATCH_ISSUER_DEFAULT_HASH={MATCH_ISSUER_DEFAULT_HASH} is not a concrete hash"
            )
        return _concrete_hash(default)

    return _concrete_hash(hash_alg)


def _sign_legacy_sha1(
    builder: x509.CertificateSigningRequestBuilder,
    private_key: PrivateKey,
) -> x509.CertificateSigningRequest:
    """
    The x509 builders only sign with SHA-2/SHA-3, so for SHA-1 the request
    info is signed directly and the CertificationRequest is built with asn1crypto.
    """
    # CertificationRequestInfo does not depend on the signature algorithm
    tbs = builder.sign(private_key, hashes.SHA256()).tbs_certrequest_bytes

    if isinstance(private_key, rsa.RSAPrivateKey):
        signature = private_key.sign(tbs, padding.PKCS1v15(), hashes.SHA1())
        signature_algorithm = {"algorithm": "sha1_rsa", "parameters": asn1_core.Null()}
    else:
        signature = private_key.sign(tbs, ec.ECDSA(hashes.SHA1()))
        signature_algorithm = {"algorithm": "sha1_ecdsa"}

    request = asn1_csr.CertificationRequest({
        "certification_request_info": asn1_csr.CertificationRequestInfo.load(tbs),
        "signature_algorithm": signature_algorithm,
        "signature": signature,
    })
    return x509.load_der_x509_csr(request.dump())


def verify_csr_signature(csr: x509.CertificateSigningRequest) -> bool:
    """Check the request's self-signature against its own public key."""
    public_key = csr.public_key()
    if isinstance(public_key, rsa.RSAPublicKey):
        verify_args = (padding.PKCS1v15(), csr.signature_hash_algorithm)
    elif isinstance(public_key, ec.EllipticCurvePublicKey):
        verify_args = (ec.ECDSA(csr.signature_hash_algorithm),)
    else:
        # Ed25519/Ed448 and friends: no separate hash to pass
        return csr.is_signature_valid

    try:
        public_key.verify(csr.signature, csr.tbs_certrequest_bytes, *verify_args)
    except InvalidSignature:
        return False
    return True


def generate_csr(
    private_key: PrivateKey,
    subject: RenderedSubject,
    sans: Optional[SANSpec],
    hash_alg: SignHashAlg,
) -> x509.CertificateSigningRequest:
    """
    Build and sign a PKCS#10 request.

    Args:
        private_key: key that signs the request (its public half goes in the request)
        subject: rendered subject; attribute order is kept as RDN order
        sans: optional SAN spec, added as a non-critical extension request
        hash_alg: signature hash

    Returns:
        CertificateSigningRequest object
    """
    algorithm = resolve_sign_hash(hash_alg)

    builder = x509.CertificateSigningRequestBuilder().subject_name(subject.to_x509_name())

    if sans is not None:
        builder = builder.add_extension(sans.to_extension(), critical=False)

    try:
        if isinstance(algorithm, hashes.SHA1):
            return _sign_legacy_sha1(builder, private_key)
        return builder.sign(private_key, algorithm)
    except Exception as e:
        logger.error(f"CSR signing failed for subject {subject.text!r}: {e}")
        raise SigningError(str(e))


def serialize_csr(csr: x509.CertificateSigningRequest) -> bytes:
    """Serialize CSR to PEM format."""
    try:
        return csr.public_bytes(serialization.Encoding.PEM)
    except Exception as e:
        raise EncodingError("certificate request", str(e), field="csr")


def build_csr(
    subject: RenderedSubject,
    sans: Optional[SANSpec],
    unique_id: Optional[str],
    key_spec: KeySpec,
    hash_alg: SignHashAlg,
) -> CSRArtifacts:
    """
    Complete CSR generation - creates a fresh key and its CSR in one call.

    Returns:
        CSRArtifacts with PEM CSR, PEM PKCS#8 private key and the untouched unique ID

    Raises:
        UnsupportedKeyTypeError, KeyGenerationError, SigningError, EncodingError
    """
    _, private_key = generate_key_pair(key_spec)
    csr = generate_csr(private_key, subject, sans, hash_alg)

    return CSRArtifacts(
        csr_pem=serialize_csr(csr).decode("ascii"),
        key_pem=serialize_private_key(private_key).decode("ascii"),
        unique_id=unique_id,
    )


def key_matches_csr(csr_pem: str, key_pem: str) -> bool:
    """True when the private key's public half is the key inside the CSR."""
    csr = x509.load_pem_x509_csr(csr_pem.encode())
    private_key = serialization.load_pem_private_key(key_pem.encode(), password=None)
    return public_key_der(csr.public_key()) == public_key_der(private_key.public_key())


def validate_csr(csr_pem: str) -> dict:
    """
    Parse and validate a CSR.

    Args:
        csr_pem: PEM-encoded CSR string

    Returns:
        dict with CSR details
    """
    try:
        csr = x509.load_pem_x509_csr(csr_pem.encode())

        subject = [
            {"type": attr.rfc4514_attribute_name, "value": attr.value}
            for attr in csr.subject
        ]

        san_names = []
        try:
            san_ext = csr.extensions.get_extension_for_class(x509.SubjectAlternativeName)
            san_names = [str(name.value) for name in san_ext.value]
        except x509.ExtensionNotFound:
            pass

        public_key = csr.public_key()
        hash_alg = csr.signature_hash_algorithm

        return {
            "valid": True,
            "subject": subject,
            "subject_dn": csr.subject.rfc4514_string(),
            "san_names": san_names,
            "signature_valid": verify_csr_signature(csr),
            "signature_hash": hash_alg.name if hash_alg else None,
            "public_key_type": type(public_key).__name__,
            "key_size": getattr(public_key, "key_size", None),
        }

    except Exception as e:
        return {
            "valid": False,
            "error": str(e)
        }
