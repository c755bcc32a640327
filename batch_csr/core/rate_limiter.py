# batch_csr/core/rate_limiter.py
"""
Rate limiting for endpoints that hand out private keys.
Uses slowapi for FastAPI rate limiting.
"""
import os
from slowapi import Limiter
from slowapi.util import get_remote_address

from batch_csr.core.config import RATE_LIMIT_ENABLED

# Batch generation returns private keys and burns CPU on key generation
# Default: 10 requests per minute per IP
SENSITIVE_RATE_LIMIT = os.getenv("SENSITIVE_RATE_LIMIT", "10/minute")

limiter = Limiter(key_func=get_remote_address, enabled=RATE_LIMIT_ENABLED)
