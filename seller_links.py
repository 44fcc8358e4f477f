"""
seller_links.py — pick the URL behind each seller's "View Deal" button.

The model often invents product IDs or hands back stale pages for the big
Indian catalogs, so for those (and for quick-commerce apps, whose product
pages are location-bound) we link to the retailer's own search instead.
Links for other, smaller stores are trusted when they look specific enough.

Decision order:
  1. classify the seller (name + link, case-insensitive)
  2. unknown store + specific link            → link as-is
  3. known store with a search template       → retailer search URL
  4. anything else                            → Google search fallback
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

from models import Seller

MAJOR      = "major"
HYPERLOCAL = "hyperlocal"

MIN_TRUSTED_LINK_LEN = 15
SEARCH_ENGINE_MARKERS = ("google.com/search", "bing.com/search")

_NOT_ALNUM = re.compile(r"[^\w\s]|_")


@dataclass(frozen=True)
class Retailer:
    key: str
    kind: str                       # MAJOR | HYPERLOCAL
    name_markers: tuple[str, ...]   # matched against the seller name
    link_markers: tuple[str, ...]   # matched against the seller link
    search_template: str            # {q} = URL-encoded product name

    def matches(self, name: str, link: str) -> bool:
        return (
            any(m in name for m in self.name_markers)
            or any(m in link for m in self.link_markers)
        )

    def search_url(self, term: str) -> str:
        return self.search_template.format(q=term)


# Order matters: first match wins.
RETAILERS: tuple[Retailer, ...] = (
    Retailer("amazon",   MAJOR, ("amazon",),   ("amazon",),          "https://www.amazon.in/s?k={q}"),
    Retailer("flipkart", MAJOR, ("flipkart",), ("flipkart.com",),    "https://www.flipkart.com/search?q={q}"),
    Retailer("croma",    MAJOR, ("croma",),    ("croma",),           "https://www.croma.com/search/?text={q}"),
    Retailer("reliance", MAJOR, ("reliance",), ("reliancedigital",), "https://www.reliancedigital.in/search?q={q}"),
    Retailer("vijay",    MAJOR, ("vijay",),    ("vijaysales",),      "https://www.vijaysales.com/search/{q}"),
    Retailer("tatacliq", MAJOR, ("tata",),     ("tatacliq",),
             "https://www.tatacliq.com/search/?searchCategory=all&text={q}"),
    Retailer("jiomart",  MAJOR, ("jiomart",),  ("jiomart",),         "https://www.jiomart.com/search/{q}"),
    Retailer("myntra",   MAJOR, ("myntra",),   ("myntra",),          "https://www.myntra.com/{q}"),
    Retailer("ajio",     MAJOR, ("ajio",),     ("ajio",),            "https://www.ajio.com/search/?text={q}"),

    Retailer("blinkit",   HYPERLOCAL, ("blinkit",),             ("blinkit",),
             "https://blinkit.com/s/?q={q}"),
    Retailer("zepto",     HYPERLOCAL, ("zepto",),               ("zepto",),
             "https://zeptonow.com/search?q={q}"),
    Retailer("instamart", HYPERLOCAL, ("swiggy", "instamart"),  ("swiggy", "instamart"),
             "https://www.swiggy.com/instamart/search?custom_back=true&query={q}"),
    Retailer("bigbasket", HYPERLOCAL, ("bigbasket",),           ("bigbasket",),
             "https://www.bigbasket.com/ps/?q={q}"),
)


def classify_seller(seller: Seller) -> Optional[Retailer]:
    """Return the known retailer this seller belongs to, if any."""
    name = (seller.name or "").lower()
    link = (seller.link or "").lower()
    for retailer in RETAILERS:
        if retailer.matches(name, link):
            return retailer
    return None


def is_search_engine_url(link: str) -> bool:
    link = link.lower()
    return any(m in link for m in SEARCH_ENGINE_MARKERS)


def clean_search_term(product_name: str) -> str:
    """
    "Apple iPhone 15 (128 GB) - Black" → "Apple%20iPhone%2015"
    Everything after the first "(" is usually storage/colour noise.
    """
    base = (product_name or "").split("(")[0]
    return quote(_NOT_ALNUM.sub(" ", base).strip(), safe="")


def resolve_seller_link(seller: Seller, product_name: str) -> str:
    retailer = classify_seller(seller)
    link = seller.link or ""

    if (
        retailer is None
        and len(link) > MIN_TRUSTED_LINK_LEN
        and not is_search_engine_url(link)
    ):
        return link

    term = clean_search_term(product_name)
    if retailer is not None:
        return retailer.search_url(term)

    store = quote(seller.name or "", safe="")
    return f"https://www.google.com/search?q={term}+{store}+price+india"
