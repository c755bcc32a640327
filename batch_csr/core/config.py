# batch_csr/core/config.py
import os
from dotenv import load_dotenv

load_dotenv()  # Load variables from a .env file if present


def _int_env(var_name: str, default: int) -> int:
    """Read an integer environment variable, failing loudly on garbage."""
    raw = os.getenv(var_name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"Environment variable '{var_name}' must be an integer, got {raw!r}")


def _bool_env(var_name: str, default: bool) -> bool:
    raw = os.getenv(var_name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


# =============================================================================
# Batch generation
# =============================================================================

# Upper bound on how many CNs a single range may expand to
CSR_BATCH_MAX_ITEMS = _int_env("CSR_BATCH_MAX_ITEMS", 10000)

# Worker pool size for per-CN generation (1 = sequential)
CSR_BATCH_MAX_WORKERS = max(1, _int_env("CSR_BATCH_MAX_WORKERS", 1))

# Hash used to sign the request when the caller asks for "MatchIssuer".
# The issuing CA decides the final certificate hash; the CSR still needs one.
MATCH_ISSUER_DEFAULT_HASH = os.getenv("MATCH_ISSUER_DEFAULT_HASH", "SHA256").upper()

# Identifier reported in the completion summary when the caller gives none
DEFAULT_OUTPUT_NAME = os.getenv("DEFAULT_OUTPUT_NAME", "output.csv")

# =============================================================================
# HTTP surface
# =============================================================================

RATE_LIMIT_ENABLED = _bool_env("RATE_LIMIT_ENABLED", True)

# =============================================================================
# Logging
# =============================================================================

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Rotating log file location; unwritable paths fall back to ./logs
LOG_DIR = os.getenv("LOG_DIR", "/var/log/batch-csr")
