"""
response_parser.py — turn the model's free text into ProductData.

Grounded responses can't be schema-constrained, so replies arrive wrapped in
code fences, prefixed with "Sure! Here is…", or carrying stray control
characters. clean_json_string() peels that off; parse_product_data() decodes
and validates. A bad payload never raises: it comes back as Unparsed and the
bot shows the raw text instead.
"""
from __future__ import annotations

import json
import logging
import re

from models import Parsed, ParseOutcome, ProductData, ProductValidationError, Unparsed

logger = logging.getLogger(__name__)

# Includes \t, \n and \r. Literal newlines inside string values would be
# invalid JSON anyway; newlines between tokens are just whitespace.
_CONTROL_CHARS = re.compile(r"[\x00-\x1F\x7F]")


def clean_json_string(raw: str) -> str:
    """Strip fences, surrounding prose and control characters from raw."""
    cleaned = raw.replace("```json", "").replace("```", "")

    first = cleaned.find("{")
    last  = cleaned.rfind("}")
    if first != -1 and last != -1 and first < last:
        cleaned = cleaned[first:last + 1]

    return _CONTROL_CHARS.sub("", cleaned)


def parse_product_data(raw: str) -> ParseOutcome:
    """Parsed(ProductData) when raw holds a product-shaped object, else Unparsed."""
    cleaned = clean_json_string(raw or "")
    try:
        data = json.loads(cleaned)
    except ValueError as exc:      # JSONDecodeError, or an int literal over the digit limit
        logger.warning("Non-JSON response (%s): %s", exc, (raw or "")[:300])
        return Unparsed(raw_text=raw or "", reason=f"JSON parse error: {exc}")

    try:
        product = ProductData.from_dict(data)
    except ProductValidationError as exc:
        logger.warning("Response JSON failed validation: %s", exc)
        return Unparsed(raw_text=raw or "", reason=str(exc))

    return Parsed(product=product)
