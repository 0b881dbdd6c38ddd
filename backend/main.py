from __future__ import annotations

import logging
import os
import time
import uuid
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

# Load .env from backend directory so OPENAI_API_KEY etc. are available
load_dotenv(Path(__file__).resolve().parent / ".env")

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.middleware.base import BaseHTTPMiddleware

from contract_analysis import ContractAnalyzer
from errors import InvalidInputError
from settings import load_settings

_LOG = logging.getLogger("uvicorn.error")

VERSION = "0.1.0"

app = FastAPI(title="Rental Contract Risk Analyzer", version=VERSION)

# CORS: use ALLOWED_ORIGINS env (comma-separated) if set, else default
_origins_env = os.environ.get("ALLOWED_ORIGINS", "").strip()
if _origins_env:
    ALLOWED_ORIGINS = [o.strip() for o in _origins_env.split(",") if o.strip()]
else:
    ALLOWED_ORIGINS = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())[:8]
        request.state.request_id = request_id
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        _LOG.info(
            "request_id=%s method=%s path=%s status=%s duration_ms=%.0f",
            request_id,
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )
        response.headers["X-Request-Id"] = request_id
        return response


app.add_middleware(RequestLogMiddleware)


class AnalyzeRequest(BaseModel):
    text: str


@lru_cache(maxsize=1)
def get_analyzer() -> ContractAnalyzer:
    return ContractAnalyzer.from_settings(load_settings())


@app.on_event("startup")
def startup_log() -> None:
    settings = load_settings()
    _LOG.info(
        "Analyzer starting (OPENAI_API_KEY configured: %s) model=%s max_attempts=%d version=%s",
        settings.ai_enabled,
        settings.model,
        settings.max_attempts,
        VERSION,
    )
    if not settings.ai_enabled:
        _LOG.warning("OPENAI_API_KEY is not set. Contracts will be analyzed with keyword matching only.")


@app.get("/health")
def health():
    settings = load_settings()
    return {
        "status": "ok",
        "ai_enabled": settings.ai_enabled,
        "model": settings.model,
        "version": VERSION,
    }


@app.post("/analyze")
async def analyze(body: AnalyzeRequest, analyzer: ContractAnalyzer = Depends(get_analyzer)):
    """Analyze contract text; always returns a result, annotated with analysisMethod and confidence."""
    try:
        result = await analyzer.analyze(body.text)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return JSONResponse(content=result.model_dump(mode="json", by_alias=True))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=os.environ.get("HOST", "127.0.0.1"),
        port=int(os.environ.get("PORT", "8010")),
        reload=True,
    )
