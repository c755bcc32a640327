# batch_csr/core/exceptions.py
"""
Custom exception classes for the batch CSR generator.
Provides structured error handling with codes for API responses.
"""
from typing import Optional


class CSRBatchException(Exception):
    """Base exception for all batch CSR errors."""

    status_code: int = 400
    code: str = "CSR_BATCH_ERROR"

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        code: str = None,
        status_code: int = None,
    ):
        self.message = message
        self.field = field
        if code:
            self.code = code
        if status_code:
            self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert exception to JSON-serializable dict."""
        data = {
            "error": self.code,
            "message": self.message,
        }
        if self.field:
            data["field"] = self.field
        return data


# =============================================================================
# Configuration Errors (detected before any key is generated)
# =============================================================================

class ConfigError(CSRBatchException):
    """Invalid batch configuration."""
    code = "CONFIG_ERROR"
    status_code = 400


class MalformedRangeError(ConfigError):
    """CN range does not end in digits."""
    code = "MALFORMED_RANGE"

    def __init__(self, token: str):
        super().__init__(
            f"Cannot parse CN range token {token!r}; expected a format like YDL0001-YDL0010",
            field="cn_range",
        )


class PrefixMismatchError(ConfigError):
    """Start and end tokens of the range use different prefixes."""
    code = "PREFIX_MISMATCH"

    def __init__(self, start_prefix: str, end_prefix: str):
        super().__init__(
            f"CN range prefixes differ: {start_prefix!r} vs {end_prefix!r}",
            field="cn_range",
        )


class ReversedRangeError(ConfigError):
    """End of the range is lower than its start."""
    code = "REVERSED_RANGE"

    def __init__(self, start: int, end: int):
        super().__init__(f"CN range end {end} is lower than start {start}", field="cn_range")


class BatchTooLargeError(ConfigError):
    """Range expands to more CNs than allowed."""
    code = "BATCH_TOO_LARGE"

    def __init__(self, count: int, limit: int):
        super().__init__(f"CN range expands to {count} names, limit is {limit}", field="cn_range")


class MalformedClauseError(ConfigError):
    """A clause is not of the form Key=[v1,v2,...]."""
    code = "MALFORMED_CLAUSE"

    def __init__(self, clause: str, field: str):
        super().__init__(f"Malformed clause {clause!r}; expected Key=[value1,value2]", field=field)


class UnknownAttributeTypeError(ConfigError):
    """Subject key does not map to a known attribute type."""
    code = "UNKNOWN_ATTRIBUTE_TYPE"

    def __init__(self, key: str):
        super().__init__(f"Unknown subject attribute type: {key!r}", field="subject_template")


class InvalidAttributeValueError(ConfigError):
    """Subject value rejected by X.509 constraints (e.g. country length)."""
    code = "INVALID_ATTRIBUTE_VALUE"

    def __init__(self, key: str, value: str, reason: str):
        super().__init__(f"Invalid value {value!r} for {key}: {reason}", field="subject_template")


class EmptySubjectError(ConfigError):
    """Template yields no clauses."""
    code = "EMPTY_SUBJECT"

    def __init__(self):
        super().__init__("Subject template is empty", field="subject_template")


class UnknownSANTypeError(ConfigError):
    """SAN clause names an unsupported type."""
    code = "UNKNOWN_SAN_TYPE"

    def __init__(self, san_type: str):
        super().__init__(f"Unknown SAN type: {san_type!r}", field="sans")


class InvalidSANValueError(ConfigError):
    """SAN value cannot be encoded for its type."""
    code = "INVALID_SAN_VALUE"

    def __init__(self, san_type: str, value: str):
        super().__init__(f"Invalid {san_type} value: {value!r}", field="sans")


class InvalidValidityWindowError(ConfigError):
    """notBefore is later than notAfter."""
    code = "INVALID_VALIDITY_WINDOW"

    def __init__(self, not_before, not_after):
        super().__init__(
            f"notBefore ({not_before.isoformat()}) is later than notAfter ({not_after.isoformat()})",
            field="not_before",
        )


class UnsupportedKeyTypeError(ConfigError):
    """Key type is not one of the supported algorithms."""
    code = "UNSUPPORTED_KEY_TYPE"

    def __init__(self, key_type):
        super().__init__(f"Unsupported key type: {key_type}", field="key_type")


class UnsupportedHashAlgorithmError(ConfigError):
    """Hash is unknown or cannot be combined with the key type."""
    code = "UNSUPPORTED_HASH_ALGORITHM"

    def __init__(self, hash_alg, reason: str = None):
        message = f"Unsupported signature hash: {hash_alg}"
        if reason:
            message += f" ({reason})"
        super().__init__(message, field="sign_hash_alg")


# =============================================================================
# Crypto Errors
# =============================================================================

class CryptoError(CSRBatchException):
    """Key generation or signing failed."""
    code = "CRYPTO_ERROR"
    status_code = 500


class KeyGenerationError(CryptoError):
    code = "KEY_GENERATION_FAILURE"

    def __init__(self, key_spec, detail: str = None):
        message = f"Failed to generate {key_spec} key pair"
        if detail:
            message += f": {detail}"
        super().__init__(message, field="private_key")


class SigningError(CryptoError):
    code = "SIGNING_FAILURE"

    def __init__(self, detail: str = None):
        message = "Failed to sign certificate request"
        if detail:
            message += f": {detail}"
        super().__init__(message, field="csr")


# =============================================================================
# Encoding Errors
# =============================================================================

class EncodingError(CSRBatchException):
    """ASN.1 or PEM serialization failed."""
    code = "ENCODING_ERROR"
    status_code = 500

    def __init__(self, what: str, detail: str = None, field: str = None):
        message = f"Failed to encode {what}"
        if detail:
            message += f": {detail}"
        super().__init__(message, field=field)


# =============================================================================
# Batch Outcome (API layer)
# =============================================================================

class BatchFailedError(CSRBatchException):
    """A batch ended without records; carries the summary for the client."""
    code = "BATCH_FAILED"

    def __init__(self, summary: dict, error: Optional[dict] = None, status_code: int = 500):
        super().__init__(
            summary["message"],
            field=error.get("field") if error else None,
            code=error["code"] if error else "BATCH_CANCELLED",
            status_code=status_code,
        )
        self.summary = summary
        self.error_detail = error

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["summary"] = self.summary
        if self.error_detail:
            data["detail"] = self.error_detail
        return data
