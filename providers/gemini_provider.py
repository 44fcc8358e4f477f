"""
Google Gemini provider — uses the google-genai SDK with Google Search grounding.

responseSchema / response_mime_type=json are rejected by the API when the
google_search tool is enabled, so the reply is free text shaped only by the
prompt. Grounding citations come back on the first candidate's metadata.
"""
from __future__ import annotations

import base64
import logging
import time
from typing import Optional

from google import genai
from google.genai import types as genai_types

from models import GroundingSource, RawResponse, TransportImagePart
from providers.base import GenerationProvider

logger = logging.getLogger(__name__)

DEFAULT_MODEL       = "gemini-2.5-flash"
DEFAULT_TEMPERATURE = 0.2


def extract_sources(response) -> list[GroundingSource]:
    """Pull (uri, title) citations off the first candidate, dropping empty uris."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []
    metadata = getattr(candidates[0], "grounding_metadata", None)
    chunks = getattr(metadata, "grounding_chunks", None) or []

    sources = []
    for chunk in chunks:
        web = getattr(chunk, "web", None)
        uri = getattr(web, "uri", None)
        if not uri:
            continue
        sources.append(GroundingSource(uri=uri, title=getattr(web, "title", None) or uri))
    return sources


class GeminiProvider(GenerationProvider):

    def __init__(
        self,
        client: genai.Client,
        model: str = DEFAULT_MODEL,
        temperature: float = DEFAULT_TEMPERATURE,
    ):
        self.name        = "google"
        self.model_id    = model
        self.temperature = temperature
        self._client     = client

    @classmethod
    def from_api_key(cls, api_key: str, **kwargs) -> "GeminiProvider":
        return cls(genai.Client(api_key=api_key), **kwargs)

    def _config(self) -> genai_types.GenerateContentConfig:
        return genai_types.GenerateContentConfig(
            tools=[genai_types.Tool(google_search=genai_types.GoogleSearch())],
            temperature=self.temperature,
        )

    async def generate(
        self,
        prompt: str,
        image: Optional[TransportImagePart] = None,
    ) -> RawResponse:
        contents: list = []
        if image is not None:
            contents.append(genai_types.Part.from_bytes(
                data=base64.b64decode(image.encoded_data),
                mime_type=image.mime_type,
            ))
        contents.append(prompt)

        t0 = time.monotonic()
        response = await self._client.aio.models.generate_content(
            model=self.model_id,
            contents=contents,
            config=self._config(),
        )
        latency_ms = int((time.monotonic() - t0) * 1000)

        text    = response.text or ""
        sources = extract_sources(response)
        logger.info(
            "[%s] OK — %d chars, %d sources, latency=%dms",
            self.full_name, len(text), len(sources), latency_ms,
        )
        return RawResponse(text=text, grounding_references=sources)
