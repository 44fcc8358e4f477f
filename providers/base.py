"""
Shared prompt and base class for generation providers.

With search grounding enabled the API refuses a response schema, so the
prompt below is the only thing that shapes the reply. Field names here must
stay in sync with ProductData.from_dict in models.py.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

from models import RawResponse, TransportImagePart

logger = logging.getLogger(__name__)

# ── Retailers the model is asked to cover ──────────────────────────────────────

PRIORITY_RETAILERS = [
    "Amazon.in", "Flipkart", "JioMart", "Croma", "Reliance Digital",
    "Vijay Sales", "Tata Cliq", "Myntra", "Ajio",
]
QUICK_COMMERCE_RETAILERS = ["Blinkit", "Zepto", "Swiggy Instamart"]

MIN_SELLERS = 6
MAX_SELLERS = 8

# ── Prompt (shared across all providers) ──────────────────────────────────────

OUTPUT_CONTRACT = """{
  "productName": "Concise product name for search (Brand + Model + Key Spec, max 5-6 words)",
  "brand": "Brand Name",
  "category": "Product Category",
  "description": "A detailed technical description of the product features.",
  "keyFeatures": ["Feature 1", "Feature 2", "Feature 3"],
  "sellers": [
    {
      "name": "Store Name",
      "price": "Price value in INR (e.g. 19999)",
      "currency": "INR",
      "link": "Direct URL to the product page (if found, otherwise leave blank)",
      "inStock": true,
      "offers": "Specific bank offers (HDFC/SBI/ICICI) or coupons"
    }
  ],
  "reviews": {
    "averageRating": 4.5,
    "totalReviews": "1,200+",
    "sentiment": "positive",
    "pros": ["Pro 1", "Pro 2"],
    "cons": ["Con 1", "Con 2"],
    "summary": "A brief summary of what Indian users are saying."
  }
}"""

_FIELD_TYPES = """Field types:
- productName, brand, category, description: string
- keyFeatures: array of strings
- sellers: array of objects; name, price, currency, link, offers are strings, inStock is a boolean
- reviews.averageRating: number between 0 and 5 (e.g. 4.5)
- reviews.totalReviews: string (e.g. "1,200+")
- reviews.sentiment: one of "positive", "neutral", "negative"
- reviews.pros, reviews.cons: arrays of strings; reviews.summary: string"""


def build_prompt(query: Optional[str], has_image: bool) -> str:
    """
    Build the single text part sent alongside the (optional) image.
    Pure function of its arguments.
    """
    query = (query or "").strip()
    lines = []
    if query:
        lines.append(f'User Query: "{query}"')
    if has_image:
        lines.append("Analyze the product shown in the image.")
    else:
        lines.append("Analyze the product mentioned in the query.")

    priority = ", ".join(PRIORITY_RETAILERS)
    quick    = ", ".join(QUICK_COMMERCE_RETAILERS)

    lines += [
        "",
        "Perform a comprehensive search using Google Search to find real-time details, "
        "prices, available offers, and reviews for this product specifically in the "
        "**INDIAN MARKET**.",
        "",
        "RETURN ONLY A VALID JSON OBJECT. Do not include markdown formatting or extra text "
        "outside the JSON.",
        "Escape all newlines in strings with \\n. Do not use control characters.",
        "",
        "The JSON structure must be exactly this:",
        OUTPUT_CONTRACT,
        "",
        _FIELD_TYPES,
        "",
        "STRICT REQUIREMENTS:",
        "1. **REGION**: Search ONLY for India. Prices must be in Indian Rupees (₹).",
        f"2. **SOURCES**: You MUST find prices from {MIN_SELLERS} to {MAX_SELLERS} "
        f"DIFFERENT Indian sellers.",
        f"   - Priority List: **{priority}**.",
        f"   - Quick Commerce (if available): **{quick}**.",
        "3. **LINKS**: Try to find direct links, but if unsure, prioritize accurate store "
        "names so we can search for it.",
        "4. **ACCURACY**: Ensure the product model matches exactly across all sellers.",
    ]
    return "\n".join(lines)


# ── Abstract base ──────────────────────────────────────────────────────────────

class GenerationProvider(ABC):
    """Base class all search-grounded generation providers must implement."""

    name: str           # e.g. "google"
    model_id: str       # e.g. "gemini-2.5-flash"

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        image: Optional[TransportImagePart] = None,
    ) -> RawResponse:
        """
        Run one grounded generation call. Must return RawResponse.
        Errors propagate untouched; retrying is the caller's job.
        """
        ...

    @property
    def full_name(self) -> str:
        return f"{self.name}/{self.model_id}"
