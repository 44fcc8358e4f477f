"""
Tests for seller_links.py — classify_seller, clean_search_term, resolve_seller_link.

Covers:
  - major-catalog sellers always get a search URL, even with a good link
  - quick-commerce sellers always get a search URL
  - unknown sellers with specific links are passed through untouched
  - short / missing / search-engine links fall back to Google
  - product-name cleaning and encoding
"""
from __future__ import annotations

import pytest

from models import Seller
from seller_links import (
    HYPERLOCAL,
    MAJOR,
    classify_seller,
    clean_search_term,
    resolve_seller_link,
)

PRODUCT = "Apple iPhone 15 (128 GB) - Black"


def seller(name: str, link: str = "") -> Seller:
    return Seller(name=name, price="69900", link=link)


# ── classify_seller() ─────────────────────────────────────────────────────────

class TestClassifySeller:
    @pytest.mark.parametrize("name,key", [
        ("Amazon.in", "amazon"),
        ("FLIPKART", "flipkart"),
        ("Croma", "croma"),
        ("Reliance Digital", "reliance"),
        ("Vijay Sales", "vijay"),
        ("Tata CLiQ", "tatacliq"),
        ("JioMart", "jiomart"),
        ("Myntra", "myntra"),
        ("AJIO", "ajio"),
    ])
    def test_major_by_name(self, name, key):
        retailer = classify_seller(seller(name))
        assert retailer is not None
        assert retailer.key == key
        assert retailer.kind == MAJOR

    @pytest.mark.parametrize("name,key", [
        ("Blinkit", "blinkit"),
        ("Zepto", "zepto"),
        ("Swiggy Instamart", "instamart"),
        ("Instamart", "instamart"),
        ("BigBasket", "bigbasket"),
    ])
    def test_hyperlocal_by_name(self, name, key):
        retailer = classify_seller(seller(name))
        assert retailer.key == key
        assert retailer.kind == HYPERLOCAL

    def test_major_by_link_only(self):
        s = seller("Official Store", "https://www.Flipkart.com/apple-iphone-15/p/itm6ac6485515ae4")
        assert classify_seller(s).key == "flipkart"

    def test_hyperlocal_by_link_only(self):
        s = seller("10-minute delivery", "https://blinkit.com/prn/iphone-15/prid/123")
        assert classify_seller(s).key == "blinkit"

    def test_unknown_seller(self):
        assert classify_seller(seller("Sangeetha Mobiles", "https://www.sangeethamobiles.com/x")) is None

    def test_missing_name_and_link(self):
        assert classify_seller(Seller(name="", price="1")) is None


# ── clean_search_term() ───────────────────────────────────────────────────────

class TestCleanSearchTerm:
    def test_drops_parenthetical(self):
        assert clean_search_term(PRODUCT) == "Apple%20iPhone%2015"

    def test_special_chars_become_spaces(self):
        assert clean_search_term("Sony WH-1000XM5") == "Sony%20WH%201000XM5"

    def test_underscore_replaced(self):
        assert clean_search_term("foo_bar") == "foo%20bar"

    def test_empty_name(self):
        assert clean_search_term("") == ""

    def test_trimmed(self):
        assert clean_search_term("  Pixel 8!  ") == "Pixel%208"


# ── resolve_seller_link() ─────────────────────────────────────────────────────

class TestResolveSellerLink:
    @pytest.mark.parametrize("name,prefix", [
        ("Amazon.in", "https://www.amazon.in/s?k="),
        ("Flipkart", "https://www.flipkart.com/search?q="),
        ("Croma", "https://www.croma.com/search/?text="),
        ("Reliance Digital", "https://www.reliancedigital.in/search?q="),
        ("Vijay Sales", "https://www.vijaysales.com/search/"),
        ("Tata Cliq", "https://www.tatacliq.com/search/?searchCategory=all&text="),
        ("JioMart", "https://www.jiomart.com/search/"),
        ("Myntra", "https://www.myntra.com/"),
        ("Ajio", "https://www.ajio.com/search/?text="),
        ("Blinkit", "https://blinkit.com/s/?q="),
        ("Zepto", "https://zeptonow.com/search?q="),
        ("BigBasket", "https://www.bigbasket.com/ps/?q="),
        ("Swiggy Instamart", "https://www.swiggy.com/instamart/search?custom_back=true&query="),
    ])
    def test_known_retailer_templates(self, name, prefix):
        assert resolve_seller_link(seller(name), PRODUCT) == prefix + "Apple%20iPhone%2015"

    def test_major_retailer_ignores_good_direct_link(self):
        link = "https://www.amazon.in/Apple-iPhone-15-128-GB/dp/B0CHX1W1XY"
        resolved = resolve_seller_link(seller("Amazon", link), PRODUCT)
        assert resolved != link
        assert resolved.startswith("https://www.amazon.in/s?k=")

    def test_major_matched_by_link_ignores_it(self):
        link = "https://www.croma.com/apple-iphone-15-128gb-black-/p/300652"
        resolved = resolve_seller_link(seller("Some Partner", link), PRODUCT)
        assert resolved.startswith("https://www.croma.com/search/?text=")

    def test_hyperlocal_ignores_direct_link(self):
        link = "https://www.zeptonow.com/pn/apple-iphone-15/pvid/abc"
        assert resolve_seller_link(seller("Zepto", link), PRODUCT).startswith("https://zeptonow.com/search?q=")

    def test_unknown_seller_specific_link_passed_through(self):
        link = "https://www.sangeethamobiles.com/apple-iphone-15-128gb"
        assert resolve_seller_link(seller("Sangeetha Mobiles", link), PRODUCT) == link

    def test_link_of_exactly_15_chars_not_trusted(self):
        link = "https://a.co/xy"          # 15 chars
        assert len(link) == 15
        resolved = resolve_seller_link(seller("Poorvika", link), PRODUCT)
        assert resolved.startswith("https://www.google.com/search?q=")

    def test_16_char_link_trusted(self):
        link = "https://a.co/xyz"
        assert resolve_seller_link(seller("Poorvika", link), PRODUCT) == link

    def test_search_engine_link_not_trusted(self):
        link = "https://www.google.com/search?q=iphone+15+poorvika"
        resolved = resolve_seller_link(seller("Poorvika", link), PRODUCT)
        assert resolved == "https://www.google.com/search?q=Apple%20iPhone%2015+Poorvika+price+india"

    def test_missing_link_generic_fallback(self):
        resolved = resolve_seller_link(seller("Poorvika"), PRODUCT)
        assert resolved == "https://www.google.com/search?q=Apple%20iPhone%2015+Poorvika+price+india"

    def test_fallback_encodes_store_name(self):
        resolved = resolve_seller_link(seller("Sangeetha Mobiles"), "Pixel 8")
        assert resolved == "https://www.google.com/search?q=Pixel%208+Sangeetha%20Mobiles+price+india"

    def test_deterministic(self):
        s = seller("Flipkart", "https://www.flipkart.com/x")
        assert resolve_seller_link(s, PRODUCT) == resolve_seller_link(s, PRODUCT)
