from __future__ import annotations

import json
from typing import Any

from receipt_review.core.config import settings
from receipt_review.core.errors import CategorizationFailedError
from receipt_review.core.llm import chat_completion, llm_available, parse_json_object

_RESPONSE_SHAPE = """{
  "category": string, // updated expense category label
  "businessCategory": string | null, // optional business-facing grouping (e.g., Client Entertainment)
  "glAccount": string, // accounting GL code (Meals, Lodging, Transport, Supplies, Misc)
  "employeeId": string | null, // choose employee id or null
  "functionalTeamCode": string | null, // choose team code
  "tripId": string | null, // choose trip id
  "confidence": number, // 0-1 confidence score
  "notes": string[], // bullet reasoning
  "splitAllocations": [
    { "glAccount": string, "amount": number | null, "percent": number | null, "notes": string | null }
  ] // optional, set [] if not needed
}"""


def build_prompt(
    *,
    receipt: dict[str, Any],
    assignment: dict[str, Any],
    employees: list[dict[str, Any]],
    teams: list[dict[str, Any]],
    trips: list[dict[str, Any]],
) -> str:
    def _block(title: str, value: Any) -> str:
        return f"{title}:\n{json.dumps(value, indent=2, default=str)}"

    return "\n\n".join(
        [
            "You are an accounting assistant. Review the receipt details, existing "
            "assignment, and organization reference data.",
            _block("Receipt", receipt),
            _block("Existing assignment", assignment),
            _block("Employees", employees),
            _block("Teams", teams),
            _block("Trips", trips),
            "Return STRICT JSON with keys:\n" + _RESPONSE_SHAPE,
            "Return JSON ONLY with those keys.",
        ]
    )


def request_suggestion(prompt: str) -> Any:
    """
    Ask the model for a categorization suggestion and return the decoded JSON.

    The payload is untrusted and goes through ``parse_suggestion``. Transport
    and decoding failures raise CategorizationFailedError.
    """
    if not llm_available():
        raise CategorizationFailedError("OPENAI_API_KEY missing")

    payload = {
        "model": settings.openai_model,
        "temperature": 0,
        "messages": [
            {
                "role": "system",
                "content": "You are an expert accounting assistant returning strict JSON.",
            },
            {"role": "user", "content": prompt},
        ],
    }
    content = chat_completion(payload, error_cls=CategorizationFailedError)
    obj = parse_json_object(content)
    if obj is None:
        raise CategorizationFailedError("Suggestion response was not JSON")
    return obj
