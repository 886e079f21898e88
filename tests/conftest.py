import io
from typing import Dict, List
from unittest.mock import MagicMock

import fitz
import pytest
from fastapi.testclient import TestClient
from PIL import Image
from pydantic_ai.messages import ModelMessage, ModelResponse, TextPart
from pydantic_ai.models.function import AgentInfo, FunctionModel

PROCESSOR_NAME = "projects/demo-project/locations/us/processors/abc123"


@pytest.fixture()
def env(monkeypatch: pytest.MonkeyPatch):
    """Baseline environment: Gemini key plus a configured Document AI processor."""
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    monkeypatch.setenv("GEMINI_MODEL", "gemini-2.5-flash")
    monkeypatch.setenv("DOCAI_PROJECT_ID", "demo-project")
    monkeypatch.setenv("DOCAI_LOCATION", "us")
    monkeypatch.setenv("DOCAI_PROCESSOR_ID", "abc123")
    for name in ("DEBUG_EXTRACTION", "MAX_FILE_MB", "MAX_PDF_PAGES", "PORT"):
        monkeypatch.delenv(name, raising=False)

    from cvscan.api.deps import clear_caches

    clear_caches()
    yield monkeypatch
    clear_caches()


@pytest.fixture()
def settings(env):
    from cvscan.core.config import get_settings

    return get_settings()


class ScriptedModel:
    """FunctionModel wrapper whose reply text tests can change; records every call."""

    def __init__(self, reply: str = "{}"):
        self.reply = reply
        self.error: Exception | None = None
        self.calls: List[List[ModelMessage]] = []
        self.model = FunctionModel(self._respond)

    def _respond(self, messages: List[ModelMessage], info: AgentInfo) -> ModelResponse:
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return ModelResponse(parts=[TextPart(self.reply)])


@pytest.fixture()
def scripted_model() -> ScriptedModel:
    return ScriptedModel()


@pytest.fixture()
def docai_client() -> MagicMock:
    """Stand-in for DocumentProcessorServiceClient."""
    client = MagicMock()
    client.processor_path.return_value = PROCESSOR_NAME
    return client


@pytest.fixture()
def client(env, settings, scripted_model: ScriptedModel, docai_client: MagicMock) -> TestClient:
    """TestClient with Gemini and Document AI replaced by in-process fakes."""
    from cvscan.api.deps import get_documentai_service, get_gemini_extractor
    from cvscan.extraction.documentai_client import DocumentAIService
    from cvscan.extraction.model_client import GeminiExtractor
    from cvscan.main import app

    extractor = GeminiExtractor(settings, model=scripted_model.model)
    docai = DocumentAIService(settings, client=docai_client)
    app.dependency_overrides[get_gemini_extractor] = lambda: extractor
    app.dependency_overrides[get_documentai_service] = lambda: docai
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def png_bytes() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (8, 8), "white").save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture()
def jpeg_bytes() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (8, 8), "white").save(buf, format="JPEG")
    return buf.getvalue()


@pytest.fixture()
def make_pdf():
    def _make(pages: int = 1) -> bytes:
        doc = fitz.open()
        for _ in range(pages):
            doc.new_page()
        data = doc.tobytes()
        doc.close()
        return data

    return _make


@pytest.fixture()
def profile() -> Dict[str, str]:
    return {
        "Name": "Amina Nakato",
        "Religion": "Islam - الإسلام",
        "Passportnumber": "B1234567",
        "dateofbirth": "1995-03-14",
        "Nationality": "Uganda - أوغندا",
        "maritalstatus": "Single - عازبة",
    }
