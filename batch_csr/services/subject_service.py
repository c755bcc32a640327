# batch_csr/services/subject_service.py
"""
Subject template rendering.

    CN=[{CN}]; O=[TrustAsia Technologies\\, Inc.]; OU=[Dept 1,Dept 2]

Step 1 replaces every literal {CN}. Step 2 parses the clauses. Clause
order is kept as-is: it becomes the RDN order of the request subject.
"""
from dataclasses import dataclass
from typing import Tuple

from cryptography import x509
from cryptography.x509.oid import NameOID, ObjectIdentifier

from batch_csr.core.exceptions import (
    EmptySubjectError,
    InvalidAttributeValueError,
    UnknownAttributeTypeError,
)
from batch_csr.services.clause_parser import parse_clauses

CN_PLACEHOLDER = "{CN}"

# Template key (upper-cased) -> (canonical short name, OID)
SUBJECT_ATTRIBUTE_TYPES = {
    "CN": ("CN", NameOID.COMMON_NAME),
    "O": ("O", NameOID.ORGANIZATION_NAME),
    "OU": ("OU", NameOID.ORGANIZATIONAL_UNIT_NAME),
    "C": ("C", NameOID.COUNTRY_NAME),
    "ST": ("ST", NameOID.STATE_OR_PROVINCE_NAME),
    "L": ("L", NameOID.LOCALITY_NAME),
    "STREET": ("STREET", NameOID.STREET_ADDRESS),
    "POSTALCODE": ("postalCode", NameOID.POSTAL_CODE),
    "E": ("emailAddress", NameOID.EMAIL_ADDRESS),
    "EMAIL": ("emailAddress", NameOID.EMAIL_ADDRESS),
    "EMAILADDRESS": ("emailAddress", NameOID.EMAIL_ADDRESS),
    "SERIALNUMBER": ("serialNumber", NameOID.SERIAL_NUMBER),
    "DC": ("DC", NameOID.DOMAIN_COMPONENT),
    "UID": ("UID", NameOID.USER_ID),
    "T": ("title", NameOID.TITLE),
    "TITLE": ("title", NameOID.TITLE),
    "GN": ("GN", NameOID.GIVEN_NAME),
    "SN": ("SN", NameOID.SURNAME),
}


@dataclass(frozen=True)
class SubjectAttribute:
    name: str
    oid: ObjectIdentifier
    values: Tuple[str, ...]


@dataclass(frozen=True)
class RenderedSubject:
    """Subject for one CN: the substituted template text plus its parsed attributes."""
    text: str
    attributes: Tuple[SubjectAttribute, ...]

    def pairs(self):
        """[(attribute name, [values]), ...] in template order."""
        return [(attr.name, list(attr.values)) for attr in self.attributes]

    def to_x509_name(self) -> x509.Name:
        """
        Build the request subject, one RDN per value, in template order.

        Raises:
            InvalidAttributeValueError: value rejected by X.509 (e.g. C must be 2 letters)
        """
        rdns = []
        for attr in self.attributes:
            for value in attr.values:
                try:
                    rdns.append(x509.RelativeDistinguishedName([x509.NameAttribute(attr.oid, value)]))
                except ValueError as e:
                    raise InvalidAttributeValueError(attr.name, value, str(e))
        return x509.Name(rdns)


def substitute_cn(template: str, cn: str) -> str:
    """Replace every literal {CN}; nothing else is substituted."""
    return template.replace(CN_PLACEHOLDER, cn)


def resolve_attribute_type(key: str):
    try:
        return SUBJECT_ATTRIBUTE_TYPES[key.strip().upper()]
    except KeyError:
        raise UnknownAttributeTypeError(key)


def render_subject(template: str, cn: str) -> RenderedSubject:
    """
    Render the subject for a single CN.

    Raises:
        EmptySubjectError: template is empty or has no clauses
        MalformedClauseError: a clause is not Key=[...]
        UnknownAttributeTypeError: key has no attribute mapping
    """
    if template is None or not template.strip():
        raise EmptySubjectError()

    text = substitute_cn(template, cn).strip()
    clauses = parse_clauses(text, field="subject_template")
    if not clauses:
        raise EmptySubjectError()

    attributes = []
    for key, values in clauses:
        name, oid = resolve_attribute_type(key)
        attributes.append(SubjectAttribute(name=name, oid=oid, values=tuple(values)))

    return RenderedSubject(text=text, attributes=tuple(attributes))
