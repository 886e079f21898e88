"""FastAPI dependency providers for upstream clients.

Each client is built once per process from the cached Settings; tests replace
them through ``app.dependency_overrides``.
"""

from functools import lru_cache

from fastapi import HTTPException

from cvscan.core.config import get_settings
from cvscan.extraction.documentai_client import DocumentAIService
from cvscan.extraction.model_client import GeminiExtractor


@lru_cache
def get_gemini_extractor() -> GeminiExtractor:
    return GeminiExtractor(get_settings())


@lru_cache
def _documentai_service() -> DocumentAIService:
    return DocumentAIService(get_settings())


def get_documentai_service() -> DocumentAIService:
    if not get_settings().documentai_configured:
        raise HTTPException(503, "documentai_not_configured")
    return _documentai_service()


def clear_caches() -> None:
    get_settings.cache_clear()
    get_gemini_extractor.cache_clear()
    _documentai_service.cache_clear()
