from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
import os

from batch_csr import __version__
from batch_csr.core.rate_limiter import limiter
from batch_csr.core.exceptions import CSRBatchException
from batch_csr.core.logger import setup_logger
from batch_csr.api.endpoints import csr

logger = setup_logger("csrbatch.main")

app = FastAPI(
    title="Batch CSR Generator",
    description="Batch generation of key pairs and PKCS#10 certificate signing requests",
    version=__version__,
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(CSRBatchException)
async def csr_batch_exception_handler(request: Request, exc: CSRBatchException):
    """Handle all batch CSR exceptions with structured JSON response."""
    logger.warning(f"CSR batch exception: {exc.code} - {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
    )


_cors_env = os.getenv("BACKEND_CORS_ORIGINS", "http://localhost:5173")
_cors_origins = [o.strip() for o in _cors_env.split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(csr.router, prefix="/api/v1")


@app.get("/healthz")
def healthz():
    return {"status": "ok"}


@app.get("/")
def read_root():
    return {"message": "Batch CSR Generator - Backend is running!"}
