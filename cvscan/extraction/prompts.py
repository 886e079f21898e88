"""Central prompt templates for worker profile extraction.

Separate module so the route handlers stay lean and prompt wording can evolve
independently. Every route builds its instructions from the same
ExtractionSchema and ALLOWED_VALUES table.
"""
import json
from typing import Dict, Tuple

from cvscan.extraction.schemas import (
    ALLOWED_VALUES,
    EXPERIENCE_YEARS,
    LANGUAGE_FIELDS,
    SKILL_FIELDS,
    ExtractionSchema,
)

DOCUMENT_SOURCE = "document"
TEXT_SOURCE = "text"

STRICT_RULES = """STRICT RULES:
- Return ONLY the keys listed below.
- Do NOT add extra keys.
- Do NOT change key names.
- All values must be strings.
- If a value is missing, return null.
- Dates must be ISO format YYYY-MM-DD.
- JSON only, no text, no markdown.
- Use EXACTLY the values from the allowed lists below - do NOT translate or modify them."""

# Fields rendered as their own section; the rest of ALLOWED_VALUES is grouped below
_SECTIONS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("Education", ("Education",)),
    ("Experience", ("Experience",)),
    ("Marital Status", ("maritalstatus",)),
    ("Religion", ("Religion",)),
    ("Language Levels", LANGUAGE_FIELDS),
    ("Skills Levels", SKILL_FIELDS),
    ("Nationality", ("Nationality",)),
)


def _required_keys_block(schema: ExtractionSchema) -> str:
    skeleton = {name: None for name in schema.fields}
    return json.dumps(skeleton, indent=2, ensure_ascii=False)


def _allowed_values_block(schema: ExtractionSchema, allowed: Dict[str, Tuple[str, ...]]) -> str:
    wanted = set(schema.fields)
    lines = ["ALLOWED VALUES (USE EXACTLY AS SHOWN - DO NOT MODIFY):"]
    for title, fields in _SECTIONS:
        present = [f for f in fields if f in wanted and f in allowed]
        if not present:
            continue
        lines.append("")
        lines.append(f"{title} ({', '.join(present)}):")
        lines.extend(f'- "{value}"' for value in allowed[present[0]])
    if "ExperienceYears" in wanted and "Experience" in wanted:
        lines.append("")
        lines.append("ExperienceYears (derived from Experience):")
        lines.extend(
            f'- If Experience is "{level}" -> "{years}"' for level, years in EXPERIENCE_YEARS.items()
        )
    return "\n".join(lines)


def build_prompt(
    schema: ExtractionSchema,
    source: str = DOCUMENT_SOURCE,
    allowed: Dict[str, Tuple[str, ...]] = ALLOWED_VALUES,
) -> str:
    """Return the extraction instructions for a document or a text input.

    The input itself (file bytes or raw text) is sent as the user message; this
    string is passed as the agent instructions.
    """
    subject = "the attached document" if source == DOCUMENT_SOURCE else "the text provided by the user"
    return "\n\n".join(
        [
            f"Extract information from {subject} and return ONLY a valid flat JSON object.",
            STRICT_RULES,
            "REQUIRED KEYS (ALL MUST EXIST):\n" + _required_keys_block(schema),
            _allowed_values_block(schema, allowed),
        ]
    )
