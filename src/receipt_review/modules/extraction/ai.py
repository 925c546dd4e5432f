from __future__ import annotations

import base64
from typing import Any

from receipt_review.core.config import settings
from receipt_review.core.errors import ExtractionFailedError
from receipt_review.core.llm import chat_completion, llm_available, parse_json_object

_EXTRACTION_PROMPT = (
    "Extract fields as JSON with keys: merchant, amountTotal, amountTax, currency, "
    "items[{description,amount}], date (ISO if possible), location{city,state,country}, "
    "paymentMethod, category, invoiceNumber. Use null if unknown. Return ONLY JSON."
)


def vision_model_name() -> str:
    return f"openai:{settings.openai_vision_model}"


def extract_receipt_fields(*, body: bytes, filename: str, mime: str | None) -> dict[str, Any]:
    """
    Run the vision model over one receipt image and return its raw JSON object.

    The result is untrusted; callers pass it through ``coerce_extraction``.
    Raises ExtractionFailedError on any transport, HTTP or parse failure.
    """
    if not llm_available():
        raise ExtractionFailedError("OPENAI_API_KEY missing", filename=filename)

    data_url = f"data:{mime or 'image/png'};base64,{base64.b64encode(body).decode('ascii')}"
    payload = {
        "model": settings.openai_vision_model,
        "temperature": 0,
        "messages": [
            {"role": "system", "content": "You are a strict JSON extractor."},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": _EXTRACTION_PROMPT},
                    {"type": "image_url", "image_url": {"url": data_url}},
                ],
            },
        ],
    }
    content = chat_completion(payload, error_cls=ExtractionFailedError)
    obj = parse_json_object(content)
    if not isinstance(obj, dict):
        raise ExtractionFailedError(
            f"Failed to parse vision response for {filename}", filename=filename
        )
    return obj
