"""
analyzer.py — the analysis request pipeline.

  image bytes ─► normalize_image ─┐
  query ──────────────────────────┼─► build_prompt ─► call_with_retry(provider.generate)
                                  │                          │
                                  └──────────────────────────┴─► parse_product_data ─► AnalysisResult

The provider (and the SDK client inside it) is built by main.py and handed
in; nothing here reads config or holds global state, so one analyzer can
serve every user concurrently.

Only two things escape analyze() as exceptions:
  • ImageProcessingError — the photo could not be decoded / re-encoded
  • whatever the provider raised on its final attempt
A malformed reply is a normal result with product_data=None.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional

from image_normalizer import (
    DEFAULT_MAX_DIM, DEFAULT_QUALITY, ImageProcessingError, normalize_image,
)
from models import AnalysisRequest, AnalysisResult, Parsed, TransportImagePart
from providers.base import GenerationProvider, build_prompt
from providers.retry import DEFAULT_DELAY, DEFAULT_RETRIES, call_with_retry
from response_parser import parse_product_data

logger = logging.getLogger(__name__)


class ProductAnalyzer:

    def __init__(
        self,
        provider: GenerationProvider,
        retries: int = DEFAULT_RETRIES,
        base_delay: float = DEFAULT_DELAY,
        max_image_dim: int = DEFAULT_MAX_DIM,
        jpeg_quality: int = DEFAULT_QUALITY,
    ):
        self.provider      = provider
        self.retries       = retries
        self.base_delay    = base_delay
        self.max_image_dim = max_image_dim
        self.jpeg_quality  = jpeg_quality

    async def _prepare_image(self, image_bytes: bytes) -> TransportImagePart:
        try:
            return await asyncio.to_thread(
                normalize_image, image_bytes, self.max_image_dim, self.jpeg_quality,
            )
        except ImageProcessingError as exc:
            logger.error("Image processing failed: %s", exc)
            raise

    async def analyze(
        self,
        query: Optional[str] = None,
        image: Optional[bytes] = None,
    ) -> AnalysisResult:
        return await self.run(AnalysisRequest(query=query, image_bytes=image))

    async def run(self, request: AnalysisRequest) -> AnalysisResult:
        image_part = None
        if request.has_image:
            image_part = await self._prepare_image(request.image_bytes)

        prompt = build_prompt(request.clean_query, has_image=image_part is not None)

        try:
            raw = await call_with_retry(
                lambda: self.provider.generate(prompt, image_part),
                retries=self.retries,
                delay=self.base_delay,
            )
        except Exception as exc:
            logger.error("[%s] Generation failed: %s", self.provider.full_name, exc)
            raise

        outcome = parse_product_data(raw.text)
        if isinstance(outcome, Parsed):
            product = outcome.product
            logger.info(
                "Parsed '%s' — %d sellers, %d sources",
                product.product_name, len(product.sellers), len(raw.grounding_references),
            )
        else:
            product = None
            logger.info("Falling back to raw text (%s)", outcome.reason)

        return AnalysisResult(
            product_data=product,
            sources=list(raw.grounding_references),
            raw_text=raw.text,
        )
