"""Google Document AI wrapper: OCR a document and manage the processor state.

The Document AI SDK is synchronous; route handlers call these methods through
``run_in_threadpool``. The SDK client is injectable so tests can pass a mock.
"""

from typing import Any, Optional
import logging

from google.api_core import exceptions as gexc
from google.api_core.client_options import ClientOptions
from google.cloud import documentai_v1 as documentai

from cvscan.core.config import Settings
from cvscan.extraction.schemas import ProcessorState

log = logging.getLogger("cvscan.documentai")


def _default_client(location: str) -> documentai.DocumentProcessorServiceClient:
    # Regional endpoint is required for non-"us" processors
    return documentai.DocumentProcessorServiceClient(
        client_options=ClientOptions(api_endpoint=f"{location}-documentai.googleapis.com")
    )


class DocumentAIService:
    """OCR + enable/disable/status for the single configured processor."""

    def __init__(self, settings: Settings, client: Optional[Any] = None):
        if not settings.documentai_configured:
            raise RuntimeError("documentai_not_configured")
        self.settings = settings
        self.client = client or _default_client(settings.DOCAI_LOCATION)
        self.processor_name = self.client.processor_path(
            settings.DOCAI_PROJECT_ID, settings.DOCAI_LOCATION, settings.DOCAI_PROCESSOR_ID
        )

    def process_document(self, content: bytes, mime_type: str) -> str:
        """Run the processor on raw bytes and return the recognized text."""
        raw_document = documentai.RawDocument(content=content, mime_type=mime_type)
        request = documentai.ProcessRequest(name=self.processor_name, raw_document=raw_document)
        result = self.client.process_document(request=request)
        text = result.document.text or ""
        log.info("documentai_processed processor=%s mime=%s chars=%d", self.processor_name, mime_type, len(text))
        return text

    def get_state(self) -> ProcessorState:
        processor = self.client.get_processor(
            request=documentai.GetProcessorRequest(name=self.processor_name)
        )
        return ProcessorState(
            processor=processor.name or self.processor_name,
            display_name=processor.display_name or None,
            state=documentai.Processor.State(processor.state).name,
        )

    def enable(self) -> ProcessorState:
        return self._toggle(enable=True)

    def disable(self) -> ProcessorState:
        return self._toggle(enable=False)

    def _toggle(self, enable: bool) -> ProcessorState:
        action = "enable" if enable else "disable"
        try:
            if enable:
                operation = self.client.enable_processor(
                    request=documentai.EnableProcessorRequest(name=self.processor_name)
                )
            else:
                operation = self.client.disable_processor(
                    request=documentai.DisableProcessorRequest(name=self.processor_name)
                )
            operation.result(timeout=self.settings.DOCAI_TIMEOUT_S)
            log.info("processor_%s processor=%s", action, self.processor_name)
        except gexc.FailedPrecondition as exc:
            # Already in the requested state
            log.info("processor_%s_noop processor=%s reason=%s", action, self.processor_name, exc.message)
        return self.get_state()
