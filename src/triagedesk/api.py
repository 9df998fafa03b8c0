"""Summary: FastAPI application for triagedesk.

Importance: Exposes classification, analysis, history, and settings over HTTP.
Alternatives: Use a CLI-only workflow or a different web framework.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field

from triagedesk.app import AppServices, build_services
from triagedesk.categories import normalize_category
from triagedesk.config import AppConfig
from triagedesk.response_templates import (
    ResponseTemplate,
    fill_template,
    template_categories,
    templates_for_category,
)
from triagedesk.services import BatchSizeError
from triagedesk.storage.repositories import RecordNotFoundError
from triagedesk.validation import MessageValidationError

EXPORT_MEDIA_TYPES = {"csv": "text/csv", "json": "application/json"}


class MessageRequest(BaseModel):
    """Summary: Request payload carrying one customer message.

    Importance: ``message`` stays untyped so bad input yields 400, not 422.
    Alternatives: Declare ``message: str`` and accept FastAPI's 422 responses.
    """

    message: Any = None


class AnalyzeRequest(MessageRequest):
    """Summary: Request payload for a full analysis.

    Importance: ``confirm`` must be true to proceed past advisory warnings.
    Alternatives: Always proceed and return warnings alongside the result.
    """

    confirm: bool = False


class BatchRequest(BaseModel):
    """Summary: Request payload for bulk classification or analysis.

    Importance: The size limit is checked by the service, before any work starts.
    Alternatives: Enforce the limit with a Pydantic constraint.
    """

    messages: Any = None


class TemplateBody(BaseModel):
    name: str = ""
    subject: str = ""
    body: str


class FillTemplateRequest(BaseModel):
    """Summary: Request payload for placeholder substitution.

    Importance: Accepts either a raw string or a full reply template.
    Alternatives: Fill templates only by category and name.
    """

    template: str | TemplateBody
    values: dict[str, str] = Field(default_factory=dict)


def create_app(config: AppConfig, services: AppServices | None = None) -> FastAPI:
    """Summary: Create a FastAPI app wired to triagedesk services.

    Importance: Ensures the API layer shares the same configuration and storage.
    Alternatives: Instantiate services globally outside the factory.
    """

    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    app = FastAPI(title="triagedesk API", version="0.1.0")
    services = services or build_services(config)
    app.state.last_deleted = None

    def require_api_key(x_api_key: str | None = Header(default=None)) -> None:
        """Summary: Enforce API key authentication when configured.

        Importance: Adds a minimal security layer for local and private deployments.
        Alternatives: Use OAuth or session-based authentication.
        """

        if not config.api_key:
            return
        if x_api_key != config.api_key:
            raise HTTPException(status_code=401, detail="Invalid API key")

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(_: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": "Invalid request body."})

    @app.exception_handler(MessageValidationError)
    async def handle_message_validation(_: Request, exc: MessageValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"errors": exc.errors})

    @app.exception_handler(BatchSizeError)
    async def handle_batch_size(_: Request, exc: BatchSizeError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(RecordNotFoundError)
    async def handle_not_found(_: Request, exc: RecordNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    def _require_message(payload: MessageRequest) -> str:
        if not isinstance(payload.message, str) or not payload.message:
            raise HTTPException(status_code=400, detail="Message is required.")
        return payload.message

    def _require_batch(payload: BatchRequest) -> list[Any]:
        if not isinstance(payload.messages, list):
            raise HTTPException(status_code=400, detail="Messages must be a list.")
        return payload.messages

    @app.get("/api/health")
    def health() -> dict[str, str]:
        """Summary: Health check endpoint.

        Importance: Supports uptime checks in local and cloud deployments.
        Alternatives: Use a metrics endpoint only.
        """

        return {"status": "ok"}

    @app.post("/api/triage", dependencies=[Depends(require_api_key)])
    def triage(payload: MessageRequest) -> dict[str, Any]:
        """Summary: Classify one message.

        Importance: Never fails on classifier errors; the rule-based fallback answers.
        Alternatives: Return 502 when the model is unavailable.
        """

        return services.gateway.classify(_require_message(payload)).to_payload()

    @app.post("/api/triage/bulk", dependencies=[Depends(require_api_key)])
    def triage_bulk(payload: BatchRequest) -> dict[str, Any]:
        return {"results": services.bulk.classify_batch(_require_batch(payload))}

    @app.post("/api/analyze", dependencies=[Depends(require_api_key)])
    def analyze(payload: AnalyzeRequest) -> Any:
        """Summary: Run the full analysis pipeline and record the result.

        Importance: Warnings require ``confirm: true``; otherwise 409 lists them.
        Alternatives: Ignore warnings on the server.
        """

        message = _require_message(payload)
        warnings = services.triage.preflight(message)
        if warnings and not payload.confirm:
            return JSONResponse(
                status_code=409,
                content={"detail": "Confirmation required.", "warnings": warnings},
            )
        record = services.triage.analyze(message)
        return {"record": record.to_dict(), "warnings": warnings}

    @app.post("/api/analyze/bulk", dependencies=[Depends(require_api_key)])
    def analyze_bulk(payload: BatchRequest) -> dict[str, Any]:
        items = services.bulk.analyze_batch(_require_batch(payload))
        return {"results": [item.to_dict() for item in items]}

    @app.get("/api/history", dependencies=[Depends(require_api_key)])
    def history(category: str | None = None, limit: int | None = None) -> dict[str, Any]:
        records = services.history.list_records(category=category, limit=limit)
        return {"records": [record.to_dict() for record in records]}

    @app.get("/api/history/export", dependencies=[Depends(require_api_key)])
    def export_history(format: str = "csv") -> Response:
        """Summary: Download the history as CSV or JSON.

        Importance: Mirrors the export available from the CLI.
        Alternatives: Stream rows for very large histories.
        """

        if format not in EXPORT_MEDIA_TYPES:
            raise HTTPException(status_code=400, detail=f"Unsupported export format: {format}")
        return Response(
            content=services.history.export(format),
            media_type=EXPORT_MEDIA_TYPES[format],
            headers={"Content-Disposition": f'attachment; filename="triage-history.{format}"'},
        )

    @app.post("/api/history/undo", dependencies=[Depends(require_api_key)])
    def undo_delete() -> dict[str, str]:
        """Summary: Restore the most recently deleted record.

        Importance: Single level; a second undo finds nothing to restore.
        Alternatives: Keep a per-client undo stack.
        """

        deleted = app.state.last_deleted
        if deleted is None or not deleted.undo():
            raise HTTPException(status_code=404, detail="Nothing to undo")
        app.state.last_deleted = None
        return {"restored": deleted.record.id}

    @app.delete("/api/history/{record_id}", dependencies=[Depends(require_api_key)])
    def delete_record(record_id: str) -> dict[str, str]:
        app.state.last_deleted = services.history.delete(record_id)
        return {"deleted": record_id}

    @app.delete("/api/history", dependencies=[Depends(require_api_key)])
    def clear_history() -> dict[str, int]:
        app.state.last_deleted = None
        return {"cleared": services.history.clear()}

    @app.get("/api/dashboard", dependencies=[Depends(require_api_key)])
    def dashboard() -> dict[str, Any]:
        return services.dashboard.dashboard().to_dict()

    @app.get("/api/settings", dependencies=[Depends(require_api_key)])
    def get_settings() -> dict[str, Any]:
        return services.settings.get().to_dict()

    @app.put("/api/settings", dependencies=[Depends(require_api_key)])
    def put_settings(payload: dict[str, Any]) -> dict[str, Any]:
        """Summary: Replace template and routing overrides.

        Importance: Unknown categories and malformed entries are ignored.
        Alternatives: Patch one category at a time.
        """

        return services.settings.update(payload).to_dict()

    @app.delete("/api/settings", dependencies=[Depends(require_api_key)])
    def reset_settings() -> dict[str, Any]:
        return services.settings.reset().to_dict()

    @app.get("/api/response-templates", dependencies=[Depends(require_api_key)])
    def response_template_categories() -> dict[str, list[str]]:
        return {"categories": template_categories()}

    @app.get("/api/response-templates/{category:path}", dependencies=[Depends(require_api_key)])
    def response_templates(category: str) -> dict[str, Any]:
        """Summary: Return reply templates for a category.

        Importance: The path converter allows "Feedback/Praise" in the URL.
        Alternatives: Pass the category as a query parameter.
        """

        return {
            "category": normalize_category(category),
            "templates": [template.to_dict() for template in templates_for_category(category)],
        }

    @app.post("/api/response-templates/fill", dependencies=[Depends(require_api_key)])
    def fill_response_template(payload: FillTemplateRequest) -> dict[str, Any]:
        if isinstance(payload.template, str):
            return {"result": fill_template(payload.template, payload.values)}
        template = ResponseTemplate(
            name=payload.template.name,
            subject=payload.template.subject,
            body=payload.template.body,
        )
        filled = fill_template(template, payload.values)
        return {"result": filled.to_dict()}

    return app
