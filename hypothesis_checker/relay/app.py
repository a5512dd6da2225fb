"""Same-origin relay in front of the Semantic Scholar Graph API.

Routes:
    GET  /api/semanticscholar?endpoint=paper/search&query=...
    POST /api/semanticscholar   {"endpoint": "paper/search", "query": ...}
    POST /api/send-summary      {"paper": {...}, "email": "..."}

Rate limiting (429) is passed through unchanged so clients can back off.
"""

import logging
from typing import Any

import httpx
from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError

from ..models import CanonicalPaper
from ..notify.email import SummarySender
from ..settings import REQUEST_TIMEOUT, SEMANTIC_SCHOLAR_BASE_URL

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "paper/search"

# Upstream endpoints that take a JSON body; everything else is a GET
POST_ENDPOINTS = {"paper/batch", "author/batch"}


def _query_params(params: dict[str, Any]) -> list[tuple[str, str]]:
    """Flatten relay params into upstream query params, expanding lists."""
    flat: list[tuple[str, str]] = []
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            flat.extend((key, str(v)) for v in value if v is not None)
        elif isinstance(value, bool):
            flat.append((key, str(value).lower()))
        else:
            flat.append((key, str(value)))
    return flat


def create_relay_app(
    contact_email: str | None,
    api_key: str | None = None,
    upstream_base_url: str = SEMANTIC_SCHOLAR_BASE_URL,
    summary_sender: SummarySender | None = None,
    timeout: float = REQUEST_TIMEOUT,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """
    Build the relay application.

    Args:
        contact_email: Contact put in the upstream User-Agent; when None the
            caller's ``From`` header is used
        api_key: Optional Semantic Scholar API key sent as ``x-api-key``
        upstream_base_url: Graph API root
        summary_sender: Backend for /api/send-summary; the route answers 503
            when it is not configured
        timeout: Upstream request timeout in seconds
        transport: Optional httpx transport for the upstream calls (tests)

    Returns:
        FastAPI application
    """
    router = APIRouter()

    def upstream_headers(request: Request) -> dict[str, str]:
        contact = contact_email or request.headers.get("from", "")
        headers = {
            "Accept": "application/json",
            "User-Agent": f"Research Hypothesis Checker (mailto:{contact})",
        }
        if api_key:
            headers["x-api-key"] = api_key
        return headers

    async def forward(request: Request, endpoint: str, params: dict[str, Any]) -> Response:
        url = f"{upstream_base_url.rstrip('/')}/{endpoint.lstrip('/')}"
        headers = upstream_headers(request)

        try:
            async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
                if endpoint in POST_ENDPOINTS:
                    logger.debug(f"POST {url} body={params}")
                    upstream = await client.post(url, json=params, headers=headers)
                else:
                    query = _query_params(params)
                    logger.debug(f"GET {url} params={query}")
                    upstream = await client.get(url, params=query, headers=headers)
        except httpx.TransportError as e:
            logger.error(f"Semantic Scholar API error: {e}")
            return JSONResponse(
                {"error": "Failed to fetch from Semantic Scholar API", "details": str(e)},
                status_code=500,
            )

        if upstream.status_code == 429:
            logger.warning("Rate limited by Semantic Scholar API")
            return JSONResponse(
                {"error": "Rate limit exceeded. Please try again in a few seconds."},
                status_code=429,
            )

        if not upstream.is_success:
            logger.error(f"Semantic Scholar HTTP {upstream.status_code}: {upstream.text[:200]}")
            return JSONResponse(
                {
                    "error": f"Semantic Scholar API error: {upstream.status_code}",
                    "details": upstream.text,
                },
                status_code=upstream.status_code,
            )

        return Response(
            content=upstream.content,
            status_code=200,
            media_type="application/json",
        )

    @router.get("/api/semanticscholar")
    async def relay_get(request: Request) -> Response:
        # repeated keys stay lists so every value reaches upstream
        params: dict[str, Any] = {}
        for key in request.query_params.keys():
            values = request.query_params.getlist(key)
            params[key] = values if len(values) > 1 else values[0]
        endpoint = params.pop("endpoint", None) or DEFAULT_ENDPOINT
        if isinstance(endpoint, list):
            endpoint = endpoint[-1]
        return await forward(request, endpoint, params)

    @router.post("/api/semanticscholar")
    async def relay_post(request: Request) -> Response:
        try:
            body = await request.json()
        except ValueError:
            return JSONResponse({"error": "Invalid JSON in request body"}, status_code=400)
        if not isinstance(body, dict):
            return JSONResponse({"error": "Request body must be an object"}, status_code=400)

        endpoint = body.pop("endpoint", None) or DEFAULT_ENDPOINT
        return await forward(request, endpoint, body)

    @router.post("/api/send-summary")
    async def send_summary(request: Request) -> JSONResponse:
        try:
            body = await request.json()
        except ValueError:
            return JSONResponse({"error": "Invalid JSON in request body"}, status_code=400)

        paper_data = body.get("paper") if isinstance(body, dict) else None
        email = body.get("email") if isinstance(body, dict) else None
        if not paper_data or not email:
            return JSONResponse(
                {"error": "Missing required fields: paper and email"}, status_code=400
            )
        if not isinstance(email, str) or "@" not in email or len(email) < 5:
            return JSONResponse({"error": "Invalid email format"}, status_code=400)

        try:
            paper = CanonicalPaper.model_validate(paper_data)
        except ValidationError as e:
            return JSONResponse(
                {"error": "Invalid paper", "details": str(e)}, status_code=400
            )

        if summary_sender is None:
            return JSONResponse({"error": "Email service not configured"}, status_code=503)

        result = await summary_sender.send(paper, email)
        if not result.success:
            return JSONResponse(
                {"error": "Failed to send email", "details": result.error}, status_code=500
            )

        return JSONResponse(
            {
                "success": True,
                "message": "Email sent successfully",
                "note": result.note,
                "id": result.message_id,
            }
        )

    app = FastAPI(
        title="Hypothesis Checker Relay",
        version="0.1.0",
        description="Same-origin relay to the Semantic Scholar API and summary mailer",
    )
    app.include_router(router)
    return app
