"""Runtime configuration helpers.

This module centralizes environment-driven runtime switches so the rest of the
codebase receives a single cached Settings instance (routes get it through
FastAPI's Depends, client factories take it as an argument).

Env vars and their roles:
        GEMINI_API_KEY     -> API key for Gemini access (required; never hard-code secrets).
        GEMINI_MODEL       -> Default Gemini model; requests may override it per call.
        HOST / PORT        -> Bind address for the `cvscan` console script.
        MAX_FILE_MB        -> Upper bound for accepted upload size (reject larger uploads early).
        MAX_PDF_PAGES      -> Max pages accepted in a PDF upload.
        DEBUG_EXTRACTION   -> Diagnostics toggle: error details, raw model text, debug logs.
        LOG_LEVEL          -> Root logging level.
        DOCAI_PROJECT_ID   -> GCP project hosting the Document AI processor.
        DOCAI_LOCATION     -> Processor region ("us" / "eu").
        DOCAI_PROCESSOR_ID -> Processor id (hex string, not the display name).
        DOCAI_TIMEOUT_S    -> Wait bound for enable/disable long-running operations.
"""

import os
from functools import lru_cache
from dotenv import load_dotenv

load_dotenv()

_TRUTHY = {"1", "true", "True", "yes"}


class Settings:
        """Central runtime switches.

        Design notes:
        - Simple class instead of pydantic BaseSettings to minimize dependencies.
        - Values read once per instance and memoized via get_settings().
        """

        def __init__(self):
                # ---- Gemini credentials / model selection ----
                self.GEMINI_API_KEY: str = os.environ.get("GEMINI_API_KEY", "")
                if not self.GEMINI_API_KEY:
                        raise ValueError("GEMINI_API_KEY is not set in the environment. Please configure it in your .env file or system environment")
                self.GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")

                # ---- Server ----
                self.HOST: str = os.getenv("HOST", "0.0.0.0")
                self.PORT: int = int(os.getenv("PORT", "4000"))

                # ---- Resource & size guards ----
                self.MAX_FILE_MB: int = int(os.getenv("MAX_FILE_MB", "50"))      # Upload size cap
                self.MAX_PDF_PAGES: int = int(os.getenv("MAX_PDF_PAGES", "20"))  # Page cap for PDF uploads

                # ---- Diagnostics ----
                self.DEBUG_EXTRACTION: bool = os.getenv("DEBUG_EXTRACTION", "0") in _TRUTHY
                self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

                # ---- Document AI processor ----
                self.DOCAI_PROJECT_ID: str = os.getenv("DOCAI_PROJECT_ID", "")
                self.DOCAI_LOCATION: str = os.getenv("DOCAI_LOCATION", "us")
                self.DOCAI_PROCESSOR_ID: str = os.getenv("DOCAI_PROCESSOR_ID", "")
                self.DOCAI_TIMEOUT_S: int = int(os.getenv("DOCAI_TIMEOUT_S", "120"))

        @property
        def max_file_bytes(self) -> int:
                return self.MAX_FILE_MB * 1024 * 1024

        @property
        def documentai_configured(self) -> bool:
                return bool(self.DOCAI_PROJECT_ID and self.DOCAI_PROCESSOR_ID)


@lru_cache
def get_settings() -> Settings:
        """Return cached singleton Settings instance.

        Using functools.lru_cache ensures each worker process resolves environment
        variables once; subsequent calls are cheap attribute access.
        """
        return Settings()
