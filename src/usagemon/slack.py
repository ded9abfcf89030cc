"""Incoming-webhook client for posting report messages to Slack."""

from typing import Any, Optional, Sequence

import httpx

from .env import get_config
from . import log


class WebhookNotConfigured(RuntimeError):
    """Raised when no webhook URL is given and SLACK_WEBHOOK_URL is unset."""


def post_blocks(
    blocks: Sequence[dict[str, Any]],
    webhook_url: Optional[str] = None,
    client: Optional[httpx.Client] = None,
    text: Optional[str] = None,
) -> None:
    """POST a Block Kit message to an incoming webhook.

    Args:
        blocks: Block Kit blocks
        webhook_url: Override for SLACK_WEBHOOK_URL
        client: Optional preconfigured httpx client (reused, not closed)
        text: Optional notification fallback text

    Raises:
        WebhookNotConfigured: No URL available
        httpx.HTTPError: Transport failure or non-2xx response
    """
    cfg = get_config()
    url = webhook_url or cfg.slack_webhook_url
    if not url:
        raise WebhookNotConfigured("SLACK_WEBHOOK_URL is not set")

    payload: dict[str, Any] = {"blocks": list(blocks)}
    if text:
        payload["text"] = text

    if client is None:
        with httpx.Client(timeout=cfg.slack_timeout_s) as owned:
            response = owned.post(url, json=payload)
    else:
        response = client.post(url, json=payload)

    response.raise_for_status()
    log.debug("Posted Slack message", blocks=len(payload["blocks"]), status=response.status_code)
