# batch_csr/services/range_service.py
"""
CN range expansion.

"YDL0001-YDL0010" -> ["YDL0001", "YDL0002", ..., "YDL0010"]

The zero-padding width comes from the start token's digit count; the end
token is padded to that same width whatever its own literal width is.
"""
import re
from dataclasses import dataclass
from typing import List

from batch_csr.core.exceptions import (
    MalformedRangeError,
    PrefixMismatchError,
    ReversedRangeError,
)

_TOKEN_RE = re.compile(r"^([A-Za-z]*)(\d+)$")


@dataclass(frozen=True)
class CNRange:
    prefix: str
    numeric_width: int
    start: int
    end: int

    def __len__(self) -> int:
        return self.end - self.start + 1

    def render(self, n: int) -> str:
        return f"{self.prefix}{n:0{self.numeric_width}d}"

    def expand(self) -> List[str]:
        return [self.render(n) for n in range(self.start, self.end + 1)]


def _split_token(token: str):
    match = _TOKEN_RE.match(token.strip())
    if not match:
        raise MalformedRangeError(token)
    prefix, digits = match.groups()
    return prefix, digits


def parse_cn_range(range_spec: str) -> CNRange:
    """
    Parse a textual CN range.

    Args:
        range_spec: "PREFIX0001" or "PREFIX0001-PREFIX0010"

    Returns:
        CNRange with start <= end

    Raises:
        MalformedRangeError: a token has no trailing digits
        PrefixMismatchError: start and end prefixes differ
        ReversedRangeError: end < start
    """
    if range_spec is None or not range_spec.strip():
        raise MalformedRangeError(range_spec or "")

    parts = range_spec.strip().split("-")
    if len(parts) > 2:
        raise MalformedRangeError(range_spec)

    prefix, start_digits = _split_token(parts[0])
    start = int(start_digits)

    if len(parts) == 1:
        return CNRange(prefix=prefix, numeric_width=len(start_digits), start=start, end=start)

    end_prefix, end_digits = _split_token(parts[1])
    if end_prefix != prefix:
        raise PrefixMismatchError(prefix, end_prefix)

    end = int(end_digits)
    if end < start:
        raise ReversedRangeError(start, end)

    return CNRange(prefix=prefix, numeric_width=len(start_digits), start=start, end=end)


def expand_cn_range(range_spec: str) -> List[str]:
    """Expand a textual CN range into CNs in ascending numeric order."""
    return parse_cn_range(range_spec).expand()
