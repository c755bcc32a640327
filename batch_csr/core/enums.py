# batch_csr/core/enums.py
"""
Enumeration types for the batch CSR generator.
Closed sets: every consumer handles each member explicitly.
"""
from enum import Enum


class KeyType(str, Enum):
    """Key algorithm and size requested for every CSR in a batch."""
    RSA_2048 = "RSA_2048"
    RSA_3072 = "RSA_3072"
    RSA_4096 = "RSA_4096"
    EC_P256 = "EC_P256"
    EC_P384 = "EC_P384"
    EC_P521 = "EC_P521"

    @property
    def display_name(self) -> str:
        """Label written to the keyPairType column."""
        return _KEY_TYPE_LABELS[self]


_KEY_TYPE_LABELS = {
    KeyType.RSA_2048: "RSA_2048",
    KeyType.RSA_3072: "RSA_3072",
    KeyType.RSA_4096: "RSA_4096",
    KeyType.EC_P256: "EC_P-256",
    KeyType.EC_P384: "EC_P-384",
    KeyType.EC_P521: "EC_P-521",
}


class SignHashAlg(str, Enum):
    """Signature hash for the request."""
    SHA256 = "SHA256"
    SHA384 = "SHA384"
    SHA512 = "SHA512"
    SHA1 = "SHA1"
    MATCH_ISSUER = "MatchIssuer"  # deferred to the issuing CA

    @property
    def is_concrete(self) -> bool:
        return self is not SignHashAlg.MATCH_ISSUER


class BatchStatus(str, Enum):
    """Terminal outcome of a batch run."""
    SUCCESS = "success"
    FAILED = "failed"
    CANCELLED = "cancelled"
