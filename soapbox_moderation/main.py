"""FastAPI application for the moderation engine.

Provides HTTP endpoints for:
- Health checks
- Content classification with learned context
- Recording moderator decisions as training cases
- Training feedback reports
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from pydantic import BaseModel, Field

from soapbox_moderation.exceptions import InvalidTransitionError, TrainingStoreError
from soapbox_moderation.models.training_case import HumanDecision, ModeratorAction
from soapbox_moderation.service import ModerationService, build_service
from soapbox_moderation.taxonomy import Category, Priority

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

SERVICE_NAME = "soapbox-moderation"
VERSION = "0.1.0"


# Request/Response models
class ClassifyRequest(BaseModel):
    """Request body for /classify endpoint."""
    content: str
    content_type: str = "post"
    # When set, the classification is held until a decision is recorded
    content_id: Optional[str] = None


class DecisionRequest(BaseModel):
    """Request body for /decisions endpoint."""
    content_id: str
    final_priority: Priority
    final_category: Category
    action: ModeratorAction
    moderator_notes: Optional[str] = None
    moderator_id: Optional[str] = None


class HealthResponse(BaseModel):
    """Response body for /health endpoint."""
    status: str
    service: str
    version: str
    environment: str
    checks: dict[str, str]


class PendingItem(BaseModel):
    """A classification awaiting a moderator decision."""
    content_id: str
    content_type: str
    priority: str
    category: str
    action_required: str
    classified_at: str
    excerpt: str = Field(description="First 100 characters of the content")


def create_app(service: Optional[ModerationService] = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        service: Service instance to serve. If None, one is built from the
            environment at startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        logger.info("Moderation service starting up...")
        if getattr(app.state, "service", None) is None:
            app.state.service = build_service()
        logger.info(f"Environment: {app.state.service.config.environment}")
        yield
        logger.info("Moderation service shutting down...")

    app = FastAPI(
        title="SoapBox Moderation",
        description="Content moderation classifier with a moderator feedback loop",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.service = service

    def get_service(request: Request) -> ModerationService:
        return request.app.state.service

    @app.get("/", response_model=dict)
    async def root(request: Request):
        """Root endpoint with basic service info."""
        config = get_service(request).config
        return {
            "service": SERVICE_NAME,
            "version": VERSION,
            "environment": config.environment,
            "status": "running",
        }

    @app.get("/health", response_model=HealthResponse)
    def health_check(request: Request):
        """Health check endpoint.

        Verifies:
        - Training store readable
        - Anthropic API key configured
        """
        service = get_service(request)
        checks = {}

        try:
            len(service.store)
            checks["training_store"] = "ok"
        except TrainingStoreError as e:
            logger.error(f"Training store health check failed: {e}")
            checks["training_store"] = f"error: {str(e)[:50]}"

        if service.config.anthropic.api_key:
            checks["anthropic"] = "configured"
        else:
            checks["anthropic"] = "missing"

        all_ok = all(v in ["ok", "configured"] for v in checks.values())

        return HealthResponse(
            status="healthy" if all_ok else "degraded",
            service=SERVICE_NAME,
            version=VERSION,
            environment=service.config.environment,
            checks=checks,
        )

    @app.post("/classify", response_model=dict)
    async def classify(body: ClassifyRequest, request: Request) -> dict[str, Any]:
        """Classify content.

        Never fails open: service errors come back as the fail-safe result
        with actionRequired "review".
        """
        service = get_service(request)

        if body.content_id:
            state = await service.workflow.aclassify(
                body.content_id, body.content, body.content_type
            )
            return {
                **state["classification"],
                "contentId": body.content_id,
                "processingStep": state["processing_step"],
            }

        result = await service.classifier.aclassify(body.content, body.content_type)
        return result.to_dict()

    @app.post("/decisions", response_model=dict)
    def record_decision(body: DecisionRequest, request: Request) -> dict[str, Any]:
        """Record a moderator decision for a held classification."""
        service = get_service(request)
        decision = HumanDecision(
            final_priority=body.final_priority,
            final_category=body.final_category,
            action=body.action,
            moderator_notes=body.moderator_notes,
            moderator_id=body.moderator_id,
        )

        try:
            case = service.workflow.record_decision(body.content_id, decision)
        except InvalidTransitionError as e:
            raise HTTPException(status_code=409, detail=str(e))
        except TrainingStoreError as e:
            logger.error(f"Failed to record decision for {body.content_id}: {e}")
            raise HTTPException(status_code=503, detail="Training store unavailable")

        return case.to_dict()

    @app.get("/pending", response_model=list[PendingItem])
    def list_pending(request: Request):
        """Classifications awaiting a moderator decision."""
        service = get_service(request)
        return [
            PendingItem(
                content_id=state["content_id"],
                content_type=state["content_type"],
                priority=state["classification"]["priority"],
                category=state["classification"]["category"],
                action_required=state["classification"]["actionRequired"],
                classified_at=state["classified_at"],
                excerpt=state["content"][:100],
            )
            for state in service.workflow.pending()
        ]

    @app.delete("/pending/{content_id}", response_model=dict)
    def discard_pending(content_id: str, request: Request):
        """Drop a held classification without recording it."""
        service = get_service(request)
        if not service.workflow.discard(content_id):
            raise HTTPException(status_code=404, detail="No pending classification")
        return {"content_id": content_id, "status": "discarded"}

    @app.get("/training/cases", response_model=list[dict])
    def recent_cases(request: Request, limit: int = Query(20, ge=1, le=500)):
        """Most recent training cases, oldest first."""
        service = get_service(request)
        try:
            return [case.to_dict() for case in service.store.recent(limit)]
        except TrainingStoreError as e:
            raise HTTPException(status_code=503, detail=str(e))

    @app.get("/training/feedback", response_model=dict)
    def training_feedback(request: Request):
        """Accuracy, common misclassifications and improvement suggestions."""
        service = get_service(request)
        try:
            return service.analyzer.analyze().to_dict()
        except TrainingStoreError as e:
            raise HTTPException(status_code=503, detail=str(e))

    return app


app = create_app()


# Run with uvicorn when called directly
if __name__ == "__main__":
    import uvicorn

    port = int(os.environ.get("PORT", 8080))
    uvicorn.run(app, host="0.0.0.0", port=port)
