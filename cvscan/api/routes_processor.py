"""FastAPI router for Document AI processor state.

Endpoints:
    GET  /processor          current state (ENABLED, DISABLED, ...)
    POST /processor/enable   enable and wait for the long-running operation
    POST /processor/disable  disable and wait for the long-running operation

Enabling an already enabled processor (or disabling a disabled one) is not an
error; the current state is returned. Handlers are sync so FastAPI runs the
blocking SDK calls in its threadpool.
"""

from typing import Callable
import logging

from fastapi import APIRouter, Depends, HTTPException

from cvscan.api.deps import get_documentai_service
from cvscan.extraction.documentai_client import DocumentAIService
from cvscan.extraction.schemas import ProcessorState

router_processor = APIRouter(prefix="/processor", tags=["processor"])
log = logging.getLogger("cvscan.documentai")

_RESPONSES = {502: {"description": "Document AI call failed"}, 503: {"description": "Document AI not configured"}}


def _call(op: Callable[[], ProcessorState], action: str) -> ProcessorState:
    try:
        return op()
    except Exception as e:
        log.warning("processor_%s_error err=%s", action, e)
        raise HTTPException(status_code=502, detail="documentai_error")


@router_processor.get("", response_model=ProcessorState, responses=_RESPONSES)
def processor_state(docai: DocumentAIService = Depends(get_documentai_service)):
    return _call(docai.get_state, "state")


@router_processor.post("/enable", response_model=ProcessorState, responses=_RESPONSES)
def enable_processor(docai: DocumentAIService = Depends(get_documentai_service)):
    return _call(docai.enable, "enable")


@router_processor.post("/disable", response_model=ProcessorState, responses=_RESPONSES)
def disable_processor(docai: DocumentAIService = Depends(get_documentai_service)):
    return _call(docai.disable, "disable")
