"""Normalization layer converting raw model text -> flat field mapping.

Why separate module?:
    Keeps transformation logic isolated from both the model clients and API
    route handlers. Every route (image, text, Document AI) funnels its upstream
    text through ``normalize`` so the output contract lives in one place.

Contract:
    - Optional ```` ``` ```` / ```` ```json ```` fences around the payload are stripped.
    - The payload must be a JSON object; anything else raises MalformedOutput.
    - Nested objects/arrays become compact JSON strings, scalars become text.
    - Output keys are exactly the schema fields, in schema order; absent -> None.
"""

import json
import re
from typing import Any, Dict, Optional

from cvscan.extraction.schemas import ExtractionSchema

_LEADING_FENCE = re.compile(r"^\s*```[A-Za-z0-9_+-]*[ \t]*\n?")
_TRAILING_FENCE = re.compile(r"\n?[ \t]*```\s*$")


class MalformedOutput(ValueError):
    """Upstream text is not a parseable flat JSON object.

    ``raw_text`` is only populated when normalize() ran with diagnostics on.
    """

    def __init__(self, reason: str, raw_text: Optional[str] = None):
        super().__init__(reason)
        self.reason = reason
        self.raw_text = raw_text


def strip_code_fence(text: str) -> str:
    """Remove one optional leading and one optional trailing fence, then trim."""
    text = _LEADING_FENCE.sub("", text, count=1)
    text = _TRAILING_FENCE.sub("", text, count=1)
    return text.strip()


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard constant {name}")


def coerce_value(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    if isinstance(value, bool):
        return "true" if value else "false"
    # 1e2 / 1.0 read as "100" / "1", the way JSON emitters print them
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return str(value)


def normalize(raw_text: str, schema: ExtractionSchema, *, diagnostics: bool = False) -> Dict[str, Optional[str]]:
    """Return a mapping holding exactly ``schema.fields``, each a string or None.

    Raises MalformedOutput when the de-fenced text is not valid JSON (including
    NaN/Infinity, oversized integers and nesting too deep to parse) or parses to
    anything other than an object (array, primitive, null).
    """
    kept_raw = raw_text if diagnostics else None
    cleaned = strip_code_fence(raw_text or "")
    try:
        parsed = json.loads(cleaned, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as exc:
        raise MalformedOutput(f"invalid_json: {exc}", kept_raw) from exc
    if not isinstance(parsed, dict):
        raise MalformedOutput(f"not_a_json_object: got {type(parsed).__name__}", kept_raw)

    try:
        coerced = {k: coerce_value(v) for k, v in parsed.items()}
    except (ValueError, RecursionError) as exc:
        raise MalformedOutput(f"unserializable_value: {exc}", kept_raw) from exc
    return {name: coerced.get(name) for name in schema.fields}
