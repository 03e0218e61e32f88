"""
Webhook Router - Thin HTTP layer
================================
Chatwoot posts conversation_created events to /?token=<AUTH_TOKEN>.
Delegates all business logic to LabelingPipeline.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from app.dependencies import get_pipeline
from app.models.response_models import WebhookResponse
from app.services.orchestrator_service import InboundRequest, LabelingPipeline

logger = logging.getLogger(__name__)

router = APIRouter()

# Every verb is routed so the gate, not FastAPI, answers wrong-method calls
ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]


@router.api_route("/", methods=ALL_METHODS)
async def receive_webhook(request: Request, pipeline: LabelingPipeline = Depends(get_pipeline)):
    """
    Webhook de Chatwoot para conversation_created.
    Clasifica el primer mensaje y agrega las etiquetas a la conversación.
    """
    inbound = InboundRequest(
        method=request.method,
        headers=request.headers,
        query_tokens=request.query_params.getlist("token"),
        body=await request.body(),
    )

    try:
        outcome = await run_in_threadpool(pipeline.process, inbound)
    except Exception as e:
        logger.exception("Error inesperado procesando webhook")
        body = WebhookResponse(status="failed", message=str(e))
        return JSONResponse(status_code=500, content=body.model_dump())

    body = WebhookResponse(**outcome.to_body())
    return JSONResponse(
        status_code=outcome.status_code(pipeline.settings.strict_status_codes),
        content=body.model_dump(),
    )
