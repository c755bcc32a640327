# batch_csr/services/san_service.py
"""
Subject alternative name parsing.

    dNSName=[a.example.com,b.example.com];iPAddress=[127.0.0.1]

Same clause grammar and escaping as the subject template. Empty input
means "no SAN extension", not an error.
"""
import ipaddress
from dataclasses import dataclass
from typing import List, Optional, Tuple

from cryptography import x509

from batch_csr.core.exceptions import InvalidSANValueError, UnknownSANTypeError
from batch_csr.services.clause_parser import parse_clauses

DNS = "dNSName"
IP = "iPAddress"
EMAIL = "rfc822Name"
URI = "uniformResourceIdentifier"

SAN_TYPE_ALIASES = {
    "DNSNAME": DNS,
    "DNS": DNS,
    "IPADDRESS": IP,
    "IP": IP,
    "RFC822NAME": EMAIL,
    "EMAIL": EMAIL,
    "UNIFORMRESOURCEIDENTIFIER": URI,
    "URI": URI,
}


def _to_general_name(san_type: str, value: str) -> x509.GeneralName:
    # Exhaustive over SAN_TYPE_ALIASES targets
    try:
        if san_type == DNS:
            return x509.DNSName(value)
        if san_type == IP:
            return x509.IPAddress(ipaddress.ip_address(value))
        if san_type == EMAIL:
            return x509.RFC822Name(value)
        if san_type == URI:
            return x509.UniformResourceIdentifier(value)
    except ValueError:
        raise InvalidSANValueError(san_type, value)
    raise UnknownSANTypeError(san_type)


@dataclass(frozen=True)
class SANSpec:
    """Ordered SAN entries: ((type, (values...)), ...), types in first-seen order."""
    entries: Tuple[Tuple[str, Tuple[str, ...]], ...]

    def as_dict(self) -> dict:
        return {san_type: list(values) for san_type, values in self.entries}

    def general_names(self) -> List[x509.GeneralName]:
        return [
            _to_general_name(san_type, value)
            for san_type, values in self.entries
            for value in values
        ]

    def to_extension(self) -> x509.SubjectAlternativeName:
        return x509.SubjectAlternativeName(self.general_names())


def parse_sans(san_spec: Optional[str]) -> Optional[SANSpec]:
    """
    Parse an optional SAN specification.

    Returns:
        SANSpec, or None when the input is absent or blank

    Raises:
        UnknownSANTypeError: clause type not recognized
        InvalidSANValueError: value cannot be encoded (e.g. bad IP)
        MalformedClauseError: clause is not Type=[...]
    """
    if san_spec is None or not san_spec.strip():
        return None

    grouped = {}
    for key, values in parse_clauses(san_spec, field="sans"):
        san_type = SAN_TYPE_ALIASES.get(key.upper())
        if san_type is None:
            raise UnknownSANTypeError(key)
        for value in values:
            _to_general_name(san_type, value)
        grouped.setdefault(san_type, []).extend(values)

    if not grouped:
        return None

    return SANSpec(entries=tuple((t, tuple(v)) for t, v in grouped.items()))
