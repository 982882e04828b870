"""Transactional email through the Resend HTTP API"""

from typing import Any, Dict, List, Union

import httpx
import structlog

from app.config import settings

logger = structlog.get_logger()


async def send_email(to: Union[str, List[str]], subject: str, text: str) -> Dict[str, Any]:
    """Send a plain-text email, skipped when no API key is configured"""
    recipients = [to] if isinstance(to, str) else list(to)

    if not settings.resend_api_key:
        logger.warning("Email API key not configured, skipping", subject=subject, recipients=len(recipients))
        return {"id": None, "status": "skipped"}

    async with httpx.AsyncClient(timeout=10.0) as client:
        response = await client.post(
            settings.resend_api_url,
            headers={
                "Authorization": f"Bearer {settings.resend_api_key}",
                "Content-Type": "application/json",
            },
            json={
                "from": settings.email_from,
                "to": recipients,
                "subject": subject,
                "text": text,
            },
        )
        response.raise_for_status()
        data = response.json()

    logger.info("Email sent", subject=subject, recipients=len(recipients), email_id=data.get("id"))
    return {"id": data.get("id"), "status": "sent"}
