from __future__ import annotations

import json
import re
from typing import Any

import httpx

from receipt_review.core.config import settings
from receipt_review.core.errors import ReceiptReviewError


def llm_available() -> bool:
    return bool(settings.openai_api_key)


def chat_completion(
    payload: dict[str, Any], *, error_cls: type[ReceiptReviewError]
) -> str:
    """POST a chat completion and return the first message's text content."""
    headers = {
        "Authorization": f"Bearer {settings.openai_api_key}",
        "Content-Type": "application/json",
    }
    url = settings.openai_base_url.rstrip("/") + "/chat/completions"
    try:
        resp = httpx.post(
            url,
            headers=headers,
            json=payload,
            timeout=float(settings.ai_timeout_seconds or 30.0),
            follow_redirects=True,
        )
        resp.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise error_cls(
            f"OpenAI error {e.response.status_code}: {e.response.text[:500]}",
            status=e.response.status_code,
        ) from e
    except httpx.HTTPError as e:
        raise error_cls(f"OpenAI request failed: {e}") from e

    try:
        message = resp.json()["choices"][0]["message"]
    except (ValueError, KeyError, IndexError, TypeError) as e:
        raise error_cls("OpenAI response missing choices") from e

    if isinstance(message, dict) and message.get("refusal"):
        raise error_cls("OpenAI refused the request")
    content = message.get("content") if isinstance(message, dict) else None
    if isinstance(content, list):
        content = "\n".join(
            str(part.get("text") or "") for part in content if isinstance(part, dict)
        )
    if not isinstance(content, str) or not content.strip():
        raise error_cls("OpenAI response had no content")
    return content


def parse_json_object(content: str) -> Any:
    c = (content or "").strip()
    if not c:
        return None
    try:
        return json.loads(c)
    except ValueError:
        pass

    # Fallback: extract the first {...} block.
    m = re.search(r"\{.*\}", c, re.S)
    if not m:
        return None
    try:
        return json.loads(m.group(0))
    except ValueError:
        return None
