from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cvscan.api.routes import router
from cvscan.api.routes_processor import router_processor
from cvscan.core.config import get_settings
from cvscan.core.logger import setup_logging
from cvscan.extraction.norm_helper import MalformedOutput
from cvscan.extraction.schemas import ErrorEnvelope

logger = logging.getLogger("cvscan")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()  # fails fast when GEMINI_API_KEY is missing
    setup_logging(settings)
    logger.info(
        "startup model=%s documentai=%s diagnostics=%s",
        settings.GEMINI_MODEL, settings.documentai_configured, settings.DEBUG_EXTRACTION,
    )
    yield
    logger.info("shutdown")


app = FastAPI(title="CV Scan Extraction API", version="0.1.0", lifespan=lifespan)  # Main ASGI app

# CORS wide-open: the recruitment frontend is served from other origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(MalformedOutput)
async def malformed_output_handler(request: Request, exc: MalformedOutput):
    logger.error("malformed_model_output path=%s reason=%s", request.url.path, exc.reason)
    diagnostics = get_settings().DEBUG_EXTRACTION
    body = ErrorEnvelope(
        error="malformed_model_output",
        details=exc.reason if diagnostics else None,
        rawResponse=exc.raw_text if diagnostics else None,
    )
    return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))


@app.get("/health")
async def health():
    return {
        "status": "OK",
        "message": "CV Scan extraction API is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


app.include_router(router)
app.include_router(router_processor)


def run() -> None:
    """Console entry point: serve the app on HOST:PORT from settings."""
    import uvicorn

    settings = get_settings()
    uvicorn.run("cvscan.main:app", host=settings.HOST, port=settings.PORT)
