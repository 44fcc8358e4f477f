"""
Shared pytest fixtures.

Image fixtures are generated in-memory with Pillow so tests never touch
real photos on disk.
"""
from __future__ import annotations

import io
import sys
from pathlib import Path
from typing import Optional

import pytest
from PIL import Image

# ── Make the project root importable without installing the package ────────────
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from models import GroundingSource, RawResponse, TransportImagePart  # noqa: E402
from providers.base import GenerationProvider  # noqa: E402


def make_image_bytes(
    width: int,
    height: int,
    fmt: str = "PNG",
    mode: str = "RGB",
    color=(200, 30, 30),
) -> bytes:
    if mode in ("RGBA", "LA") and isinstance(color, tuple) and len(color) == 3:
        color = (*color, 128)[: len(mode)]
    img = Image.new(mode, (width, height), color)
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def image_factory():
    """Call with (width, height, fmt=..., mode=...) to get encoded image bytes."""
    return make_image_bytes


class FakeProvider(GenerationProvider):
    """
    Scripted provider: each generate() call pops the next item from `script`.
    Exceptions in the script are raised, RawResponse / str items are returned.
    """

    def __init__(self, script: list):
        self.name     = "fake"
        self.model_id = "scripted"
        self.script   = list(script)
        self.calls: list[tuple[str, Optional[TransportImagePart]]] = []

    async def generate(self, prompt, image=None):
        self.calls.append((prompt, image))
        item = self.script.pop(0)
        if isinstance(item, BaseException):
            raise item
        if isinstance(item, str):
            return RawResponse(text=item, grounding_references=[])
        return item


@pytest.fixture
def fake_provider_factory():
    return FakeProvider


@pytest.fixture
def sample_sources() -> list[GroundingSource]:
    return [
        GroundingSource(uri="https://www.smartprix.com/mobiles/apple-iphone-15", title="smartprix.com"),
        GroundingSource(uri="https://www.91mobiles.com/apple-iphone-15-price-in-india", title="91mobiles.com"),
    ]
