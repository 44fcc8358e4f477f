"""
Tests for providers/base.py — build_prompt and GenerationProvider.

Covers:
  - query line present only for non-blank queries
  - image vs query analysis directive
  - India-scoped search grounding directive
  - output contract: every field, typed examples
  - retailer priority list and quick-commerce list, 6–8 seller constraint
  - escaping / no-markdown instructions
  - purity: same input → same output
"""
from __future__ import annotations

import pytest

from providers.base import (
    PRIORITY_RETAILERS,
    QUICK_COMMERCE_RETAILERS,
    GenerationProvider,
    build_prompt,
)

CONTRACT_FIELDS = [
    "productName", "brand", "category", "description", "keyFeatures",
    "sellers", "name", "price", "currency", "link", "inStock", "offers",
    "reviews", "averageRating", "totalReviews", "sentiment", "pros", "cons", "summary",
]


class TestBuildPrompt:
    def test_query_is_quoted(self):
        prompt = build_prompt("iPhone 15", has_image=False)
        assert 'User Query: "iPhone 15"' in prompt

    def test_no_query_line_when_absent(self):
        assert "User Query" not in build_prompt(None, has_image=True)

    def test_blank_query_treated_as_absent(self):
        assert "User Query" not in build_prompt("   ", has_image=True)

    def test_image_directive(self):
        prompt = build_prompt(None, has_image=True)
        assert "Analyze the product shown in the image." in prompt
        assert "mentioned in the query" not in prompt

    def test_query_directive_without_image(self):
        prompt = build_prompt("iPhone 15", has_image=False)
        assert "Analyze the product mentioned in the query." in prompt

    def test_query_and_image_together(self):
        prompt = build_prompt("black variant", has_image=True)
        assert 'User Query: "black variant"' in prompt
        assert "shown in the image" in prompt

    def test_search_grounding_india(self):
        prompt = build_prompt("iPhone 15", has_image=False)
        assert "Google Search" in prompt
        assert "INDIAN MARKET" in prompt
        assert "Search ONLY for India" in prompt

    @pytest.mark.parametrize("field", CONTRACT_FIELDS)
    def test_contract_names_every_field(self, field):
        assert f'"{field}"' in build_prompt("x", has_image=False)

    def test_contract_examples(self):
        prompt = build_prompt("x", has_image=False)
        assert '"category": "Product Category"' in prompt
        assert "e.g. 19999" in prompt
        assert '"averageRating": 4.5' in prompt
        assert '"1,200+"' in prompt
        assert '"inStock": true' in prompt

    def test_retailer_priority_list_literal(self):
        prompt = build_prompt("iPhone 15", has_image=False)
        assert (
            "Priority List: **Amazon.in, Flipkart, JioMart, Croma, Reliance Digital, "
            "Vijay Sales, Tata Cliq, Myntra, Ajio**" in prompt
        )

    def test_quick_commerce_list(self):
        prompt = build_prompt("iPhone 15", has_image=False)
        assert "Quick Commerce (if available): **Blinkit, Zepto, Swiggy Instamart**" in prompt

    def test_all_named_retailers_present(self):
        prompt = build_prompt(None, has_image=True)
        for name in PRIORITY_RETAILERS + QUICK_COMMERCE_RETAILERS:
            assert name in prompt

    def test_seller_cardinality(self):
        assert "from 6 to 8 DIFFERENT Indian sellers" in build_prompt("x", has_image=False)

    def test_escape_and_no_markdown_instructions(self):
        prompt = build_prompt("x", has_image=False)
        assert "Escape all newlines in strings with \\n" in prompt
        assert "Do not use control characters" in prompt
        assert "RETURN ONLY A VALID JSON OBJECT" in prompt
        assert "Do not include markdown formatting" in prompt

    def test_pure(self):
        assert build_prompt("q", True) == build_prompt("q", True)


class TestGenerationProvider:
    def test_cannot_instantiate_abstract(self):
        with pytest.raises(TypeError):
            GenerationProvider()

    def test_full_name(self, fake_provider_factory):
        p = fake_provider_factory([])
        assert p.full_name == "fake/scripted"
