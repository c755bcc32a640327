# batch_csr/services/clause_parser.py
"""
Grammar shared by subject templates and SAN specs:

    Key=[v1,v2,...];Key2=[...]

A backslash escapes the separators: "\\," is a literal comma inside a value
and "\\;" a literal semicolon. Any other backslash is kept as-is.
"""
import re
from typing import List, Tuple

from batch_csr.core.exceptions import MalformedClauseError

ESCAPE = "\\"

_CLAUSE_RE = re.compile(r"^\s*([^=\[\]]+?)\s*=\s*\[(.*)\]\s*$", re.DOTALL)


def split_unescaped(text: str, sep: str) -> List[str]:
    """
    Split on every `sep` not preceded by a backslash.

    Escape sequences are left in the pieces so a second, finer split can
    still see them; call unescape() on the final values.
    """
    pieces = []
    current = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == ESCAPE and i + 1 < len(text):
            current.append(text[i:i + 2])
            i += 2
            continue
        if ch == sep:
            pieces.append("".join(current))
            current = []
        else:
            current.append(ch)
        i += 1
    pieces.append("".join(current))
    return pieces


def unescape(value: str) -> str:
    return value.replace(ESCAPE + ",", ",").replace(ESCAPE + ";", ";")


def parse_clauses(text: str, field: str) -> List[Tuple[str, List[str]]]:
    """
    Parse "Key=[v1,v2];Key2=[v3]" into [(key, [values]), ...] in input order.

    Empty clauses (e.g. a trailing ';') are skipped. Keys are trimmed but
    otherwise untouched; mapping them to types is the caller's job.
    """
    clauses = []
    for raw in split_unescaped(text, ";"):
        if not raw.strip():
            continue
        match = _CLAUSE_RE.match(raw)
        if not match:
            raise MalformedClauseError(raw.strip(), field=field)
        key, body = match.groups()
        values = [unescape(v).strip() for v in split_unescaped(body, ",")]
        values = [v for v in values if v]
        if not values:
            raise MalformedClauseError(raw.strip(), field=field)
        clauses.append((key.strip(), values))
    return clauses
