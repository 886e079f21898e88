"""Model client abstraction layer.

Extended description:
        * Encapsulates provider/model setup (Gemini through pydantic-ai) so
          swapping vendors only touches this file.
        * Exposes a single async API (GeminiExtractor.run) returning a dict with
          the assistant text + timing; parsing is left to norm_helper so every
          route shares one output contract.
        * Per-request model overrides reuse the process-wide provider.
"""

from typing import Any, Dict, List, Optional, Sequence, Union
import logging
import time

from pydantic_ai import Agent, BinaryContent
from pydantic_ai.models import Model
from pydantic_ai.models.google import GoogleModel
from pydantic_ai.providers.google import GoogleProvider

from cvscan.core.config import Settings

log = logging.getLogger("cvscan.gemini")

UserInput = Union[str, Sequence[Union[str, BinaryContent]]]


class GeminiExtractor:
    """High-level wrapper for single-call extraction against Gemini.

    Key points:
        - Centralizes model construction + logging.
        - The extraction prompt is passed as agent instructions; the document
          (BinaryContent) or raw text is the only user message.
        - Output is plain text; the model is asked for JSON but not trusted.
    """

    def __init__(self, settings: Settings, model: Optional[Model] = None):
        self.settings = settings
        self._provider: Optional[GoogleProvider] = None
        if model is None:
            if not settings.GEMINI_API_KEY:
                raise RuntimeError("GEMINI_API_KEY is required and no fallback is allowed.")
            try:
                self._provider = GoogleProvider(api_key=settings.GEMINI_API_KEY)
                model = GoogleModel(settings.GEMINI_MODEL, provider=self._provider)
            except Exception as e:
                raise RuntimeError(f"Failed to initialize Gemini provider: {e}") from e
        self.model = model

    def resolve_model(self, model_name: Optional[str] = None) -> Model:
        """Return the default model, or a per-request override sharing the provider."""
        if not model_name or self._provider is None or model_name == self.settings.GEMINI_MODEL:
            return self.model
        return GoogleModel(model_name, provider=self._provider)

    def build_agent(self, instructions: str) -> Agent:
        if self.settings.DEBUG_EXTRACTION:
            log.debug("agent_build instructions_preview=%s", instructions[:220].replace('\n', ' '))
        return Agent(self.model, instructions=instructions)

    async def run(self, instructions: str, user_input: UserInput, model_name: Optional[str] = None) -> Dict[str, Any]:
        """Execute the model call and return {"raw_text", "latency_ms", "model"}."""
        model = self.resolve_model(model_name)
        agent = self.build_agent(instructions)
        if isinstance(user_input, str):
            inputs: Union[str, List[Union[str, BinaryContent]]] = user_input
        else:
            inputs = list(user_input)
        if self.settings.DEBUG_EXTRACTION:
            sizes = [len(p.data) for p in inputs if isinstance(p, BinaryContent)] if isinstance(inputs, list) else []
            log.debug("model_run start model=%s binary_parts=%s", model.model_name, sizes)
        t0 = time.time()
        try:
            result = await agent.run(inputs, model=model)
        except Exception as e:
            log.error("model_run_exception model=%s error=%s", model.model_name, e, exc_info=True)
            raise
        latency_ms = int((time.time() - t0) * 1000)
        raw_text = result.output
        if self.settings.DEBUG_EXTRACTION:
            log.debug("model_run raw_output_preview=%s latency_ms=%d", raw_text[:400].replace('\n', ' '), latency_ms)
        return {
            "raw_text": raw_text,
            "latency_ms": latency_ms,
            "model": model.model_name,
        }

    async def extract_document(self, instructions: str, data: bytes, mime_type: str, model_name: Optional[str] = None) -> Dict[str, Any]:
        return await self.run(instructions, [BinaryContent(data=data, media_type=mime_type)], model_name)

    async def extract_text(self, instructions: str, text: str, model_name: Optional[str] = None) -> Dict[str, Any]:
        return await self.run(instructions, text, model_name)
