"""
models.py — request-scoped value objects passed through the analysis pipeline.

Everything here lives for a single analyze() call. ProductData and friends
know how to build themselves from the loosely-shaped JSON the model returns;
any structural violation raises ProductValidationError, which
response_parser.py turns into an Unparsed outcome.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Optional, Union

SENTIMENTS = ("positive", "neutral", "negative")

_NON_NUMERIC = re.compile(r"[^0-9.]")


class ProductValidationError(ValueError):
    """The decoded JSON does not have the ProductData shape."""


def parse_price(value: Any) -> float:
    """
    Normalize a messy price ("₹ 1,49,999", "$129.99", 19999) to a float.
    Returns 0.0 when nothing numeric is left.
    """
    if value is None:
        return 0.0
    try:
        return float(_NON_NUMERIC.sub("", str(value)))
    except ValueError:
        return 0.0


# ── Request side ───────────────────────────────────────────────────────────────

@dataclass
class AnalysisRequest:
    query: Optional[str] = None
    image_bytes: Optional[bytes] = None

    @property
    def has_image(self) -> bool:
        return bool(self.image_bytes)

    @property
    def clean_query(self) -> Optional[str]:
        q = (self.query or "").strip()
        return q or None


@dataclass(frozen=True)
class TransportImagePart:
    """Base64 image payload ready to attach to a generation call."""
    encoded_data: str
    mime_type: str


@dataclass(frozen=True)
class GroundingSource:
    uri: str
    title: str


@dataclass
class RawResponse:
    text: str
    grounding_references: list[GroundingSource] = field(default_factory=list)


# ── Field coercion helpers ─────────────────────────────────────────────────────

def _str(data: dict, key: str, default: str = "") -> str:
    value = data.get(key)
    if value is None:
        return default
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (str, int, float)):
        return str(value).strip()
    raise ProductValidationError(f"{key!r} must be a string, got {type(value).__name__}")


def _str_list(data: dict, key: str) -> list[str]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ProductValidationError(f"{key!r} must be a list, got {type(value).__name__}")
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def _bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1", "in stock")
    return bool(value)


def _price(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (str, int, float)) and not isinstance(value, bool):
        return str(value).strip()
    return ""


# ── Parsed product ─────────────────────────────────────────────────────────────

@dataclass
class Seller:
    name: str
    price: str                  # raw, may hold symbols and separators
    currency: str = "INR"
    link: str = ""
    in_stock: bool = False
    offers: Optional[str] = None

    @property
    def price_value(self) -> float:
        return parse_price(self.price)

    @classmethod
    def from_dict(cls, data: dict) -> "Seller":
        offers = data.get("offers")
        return cls(
            name     = _str(data, "name"),
            price    = _price(data.get("price")),
            currency = _str(data, "currency", "INR") or "INR",
            link     = _str(data, "link"),
            in_stock = _bool(data.get("inStock", False)),
            offers   = (offers.strip() or None) if isinstance(offers, str) else None,
        )


@dataclass
class ReviewSummary:
    average_rating: float = 0.0     # 0–5
    total_reviews: str = "0"        # may carry a suffix, e.g. "1,200+"
    sentiment: str = "neutral"      # positive | neutral | negative
    pros: list[str] = field(default_factory=list)
    cons: list[str] = field(default_factory=list)
    summary: str = ""

    @property
    def positive_share(self) -> int:
        """Rough percentage of happy buyers derived from the star rating."""
        return int(round(self.average_rating * 20))

    @classmethod
    def from_dict(cls, data: Any) -> "ReviewSummary":
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ProductValidationError("'reviews' must be an object")

        rating = data.get("averageRating", 0)
        if isinstance(rating, bool):
            rating = 0.0
        try:
            rating = float(rating)
        except (TypeError, ValueError):
            rating = 0.0
        rating = max(0.0, min(5.0, rating))

        sentiment = _str(data, "sentiment", "neutral").lower()
        if sentiment not in SENTIMENTS:
            sentiment = "neutral"

        return cls(
            average_rating = rating,
            total_reviews  = _str(data, "totalReviews", "0") or "0",
            sentiment      = sentiment,
            pros           = _str_list(data, "pros"),
            cons           = _str_list(data, "cons"),
            summary        = _str(data, "summary"),
        )


@dataclass
class ProductData:
    product_name: str
    brand: str = ""
    category: str = ""
    description: str = ""
    key_features: list[str] = field(default_factory=list)
    sellers: list[Seller] = field(default_factory=list)
    reviews: ReviewSummary = field(default_factory=ReviewSummary)

    @classmethod
    def from_dict(cls, data: Any) -> "ProductData":
        """
        Schema-checked decode of the model's JSON object.
        Raises ProductValidationError when the payload isn't product-shaped.
        """
        if not isinstance(data, dict):
            raise ProductValidationError(
                f"top-level JSON must be an object, got {type(data).__name__}"
            )

        product_name = _str(data, "productName")
        if not product_name:
            raise ProductValidationError("'productName' is missing or empty")

        raw_sellers = data.get("sellers")
        if raw_sellers is None:
            raw_sellers = []
        if not isinstance(raw_sellers, list):
            raise ProductValidationError("'sellers' must be a list")

        sellers = []
        for entry in raw_sellers:
            # Skip nulls and entries with neither a store name nor a price
            if not isinstance(entry, dict) or not (entry.get("name") or entry.get("price")):
                continue
            sellers.append(Seller.from_dict(entry))

        return cls(
            product_name = product_name,
            brand        = _str(data, "brand"),
            category     = _str(data, "category"),
            description  = _str(data, "description"),
            key_features = _str_list(data, "keyFeatures"),
            sellers      = sellers,
            reviews      = ReviewSummary.from_dict(data.get("reviews")),
        )

    def sellers_by_price(self) -> list[Seller]:
        """Sellers sorted cheapest-first; unparseable prices count as 0."""
        return sorted(self.sellers, key=lambda s: s.price_value)


# ── Parse outcome (sum type) ───────────────────────────────────────────────────

@dataclass(frozen=True)
class Parsed:
    product: ProductData


@dataclass(frozen=True)
class Unparsed:
    raw_text: str
    reason: str


ParseOutcome = Union[Parsed, Unparsed]


# ── Pipeline result ────────────────────────────────────────────────────────────

@dataclass
class AnalysisResult:
    product_data: Optional[ProductData]
    sources: list[GroundingSource] = field(default_factory=list)
    raw_text: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        """Nothing usable came back — neither product data nor any raw text."""
        return self.product_data is None and not (self.raw_text or "").strip()
