"""Send a paper summary by email through the Resend API."""

import html
import logging
from typing import Any

import httpx

from ..models import CanonicalPaper, SendResult
from ..settings import EMAIL_SENDER, REQUEST_TIMEOUT, RESEND_API_URL

logger = logging.getLogger(__name__)

PLACEHOLDER_API_KEY = "your_resend_api_key_here"


def format_paper_email(paper: CanonicalPaper) -> str:
    """Render a paper as a standalone HTML email."""
    title = html.escape(paper.title or "Untitled Research Paper")
    year = paper.publication_year or "Unknown Year"
    citations = paper.cited_by_count or 0
    authors = html.escape(
        ", ".join(a.display_name for a in paper.authors) or "Unknown authors"
    )
    doi = html.escape(paper.doi or "")
    abstract = html.escape(paper.abstract or "")
    open_access_url = html.escape(paper.open_access_url or "")

    parts = [
        "<!DOCTYPE html>",
        "<html>",
        "<head><style>",
        "body { font-family: Arial, sans-serif; max-width: 800px; margin: 0 auto; padding: 20px; }",
        "h1 { color: #333; } .metadata { color: #555; margin-bottom: 20px; }",
        ".abstract { line-height: 1.6; } .links a { margin-right: 15px; color: #0066cc; }",
        "</style></head>",
        "<body>",
        f"<h1>{title}</h1>",
        '<div class="metadata">',
        f"<p><strong>Authors:</strong> {authors}</p>",
        f"<p><strong>Year:</strong> {year}</p>",
        f"<p><strong>Citations:</strong> {citations}</p>",
    ]
    if doi:
        parts.append(f"<p><strong>DOI:</strong> {doi}</p>")
    parts.append("</div>")
    if abstract:
        parts.append(f'<div class="abstract"><h2>Abstract</h2><p>{abstract}</p></div>')
    parts.append('<div class="links">')
    if doi:
        parts.append(f'<a href="https://doi.org/{doi}" target="_blank">View on DOI</a>')
    if open_access_url:
        parts.append(f'<a href="{open_access_url}" target="_blank">Read Full Paper</a>')
    parts.extend(["</div>", "</body>", "</html>"])
    return "\n".join(parts)


class SummarySender:
    """
    Emails paper summaries.

    The Resend free tier only delivers to the verified address, so every
    summary goes there; when the requested destination differs the result
    carries a ``note`` saying so. Failures are reported in the result, not
    raised.
    """

    def __init__(
        self,
        api_key: str | None,
        verified_address: str | None,
        sender: str = EMAIL_SENDER,
        api_url: str = RESEND_API_URL,
        timeout: float = REQUEST_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.verified_address = verified_address
        self.sender = sender
        self.api_url = api_url
        self.timeout = timeout
        self._transport = transport

    async def send(self, paper: CanonicalPaper, destination: str) -> SendResult:
        """Send ``paper``'s summary, nominally to ``destination``."""
        if not self.api_key or self.api_key == PLACEHOLDER_API_KEY:
            logger.error("Resend API key is not configured")
            return SendResult(
                success=False,
                error="Email service not configured. Set RESEND_API_KEY.",
            )

        recipient = self.verified_address
        if not recipient or "@" not in recipient:
            return SendResult(success=False, error="Contact email is not properly configured.")

        payload: dict[str, Any] = {
            "from": self.sender,
            "to": [recipient],
            "subject": f"Research Paper: {paper.title or 'Untitled Research'}",
            "html": format_paper_email(paper),
        }

        logger.info(f"Sending summary of {paper.key} to {recipient}")
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    self.api_url,
                    json=payload,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
        except httpx.TransportError as e:
            logger.error(f"Failed to send email: {e}")
            return SendResult(success=False, error=str(e))

        if not response.is_success:
            logger.error(f"Resend HTTP {response.status_code}: {response.text[:200]}")
            return SendResult(
                success=False,
                error=f"Email API error {response.status_code}: {response.text}",
            )

        message_id = None
        try:
            message_id = response.json().get("id")
        except (ValueError, AttributeError):
            logger.warning("Email API returned an unexpected body")

        note = None
        if destination.lower() != recipient.lower():
            note = (
                f"Email delivery is limited to the verified address ({recipient}); "
                f"the summary was sent there instead of {destination}."
            )
        return SendResult(success=True, note=note, message_id=message_id)
