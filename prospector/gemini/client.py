"""
Gemini client for grounded business search and analysis.

Every call to the generative-AI provider goes through GeminiClient.generate().
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Iterable, Optional, Type

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from pydantic import BaseModel
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..models import Location

logger = logging.getLogger(__name__)

# Tool names accepted by generate()
MAPS_TOOL = "maps"
SEARCH_TOOL = "search"


class GeminiError(Exception):
    """Base exception for Gemini errors."""
    pass


class AuthenticationError(GeminiError):
    """Invalid or missing API key."""
    pass


class RateLimitError(GeminiError):
    """Quota exceeded."""
    pass


class ResponseError(GeminiError):
    """Empty or blocked response."""
    pass


@dataclass
class GeminiResponse:
    """Text returned by the model and the sources it was grounded on."""

    text: str
    grounding_sources: list[str] = field(default_factory=list)


class GeminiClient:
    """
    Async client for the Gemini API.

    Usage:
        client = GeminiClient(api_key="your_key")
        response = await client.generate("...", tools=(MAPS_TOOL,))
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gemini-2.5-flash",
        max_attempts: int = 1,
        timeout: int = 60,
    ):
        """
        Initialize Gemini client.

        Args:
            api_key: Gemini API key (required)
            model: Default model identifier
            max_attempts: Attempts per call when the quota is exceeded (1 = no retry)
            timeout: Request timeout in seconds
        """
        # Try environment variable if not provided
        if not api_key:
            api_key = os.environ.get("GEMINI_API_KEY") or os.environ.get("API_KEY")

        if not api_key:
            raise AuthenticationError(
                "Gemini API key not configured. "
                "Set GEMINI_API_KEY environment variable or pass api_key parameter."
            )

        self.api_key = api_key
        self.model = model
        self.max_attempts = max(1, max_attempts)
        self.timeout = timeout

        self._client = genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(timeout=timeout * 1000),
        )
        logger.debug("Gemini client initialized (model=%s)", model)

    @classmethod
    def from_settings(cls, settings, model: Optional[str] = None) -> "GeminiClient":
        return cls(
            api_key=settings.gemini_api_key,
            model=model or settings.search_model,
            max_attempts=settings.max_attempts,
            timeout=settings.request_timeout,
        )

    async def generate(
        self,
        prompt: str,
        *,
        tools: Iterable[str] = (),
        schema: Optional[Type[BaseModel]] = None,
        model: Optional[str] = None,
        location: Optional[Location] = None,
    ) -> GeminiResponse:
        """
        Send one prompt to Gemini.

        Args:
            prompt: Natural-language prompt
            tools: Grounding tools to enable (MAPS_TOOL, SEARCH_TOOL)
            schema: Pydantic model constraining a JSON response
            model: Model override
            location: Retrieval hint for Maps grounding

        Returns:
            GeminiResponse with the response text

        Raises:
            GeminiError: on provider, network or empty-response failures
        """
        tools = tuple(tools)
        config = self._build_config(tools, schema, location)
        model = model or self.model

        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=1, min=4, max=60),
            retry=retry_if_exception_type(RateLimitError),
            reraise=True,
        ):
            with attempt:
                response = await self._call(model, prompt, config)

        return self._to_response(response)

    async def _call(self, model: str, prompt: str, config: types.GenerateContentConfig):
        logger.debug("Gemini request: model=%s, %d chars", model, len(prompt))
        try:
            return await self._client.aio.models.generate_content(
                model=model,
                contents=prompt,
                config=config,
            )
        except genai_errors.APIError as e:
            raise self._translate_error(e) from e
        except httpx.HTTPError as e:
            raise GeminiError(f"Network error calling Gemini: {e}") from e

    def _translate_error(self, error: genai_errors.APIError) -> GeminiError:
        """Map provider errors onto our exception hierarchy."""
        code = getattr(error, "code", None)
        message = getattr(error, "message", None) or str(error)
        if code in (401, 403):
            return AuthenticationError(f"Gemini rejected the API key: {message}")
        elif code == 429:
            return RateLimitError("Gemini quota exceeded")
        return GeminiError(f"Gemini error {code}: {message}")

    def _build_config(
        self,
        tools: tuple,
        schema: Optional[Type[BaseModel]],
        location: Optional[Location],
    ) -> types.GenerateContentConfig:
        kwargs = {}

        tool_list = []
        for name in tools:
            if name == MAPS_TOOL:
                tool_list.append(types.Tool(google_maps=types.GoogleMaps()))
            elif name == SEARCH_TOOL:
                tool_list.append(types.Tool(google_search=types.GoogleSearch()))
            else:
                raise ValueError(f"Unknown tool: {name}")
        if tool_list:
            kwargs["tools"] = tool_list

        if location and MAPS_TOOL in tools:
            kwargs["tool_config"] = types.ToolConfig(
                retrieval_config=types.RetrievalConfig(
                    lat_lng=types.LatLng(latitude=location.lat, longitude=location.lng)
                )
            )

        # Structured output cannot be combined with grounding tools
        if schema is not None:
            if tool_list:
                raise ValueError("A response schema cannot be combined with tools")
            kwargs["response_mime_type"] = "application/json"
            kwargs["response_schema"] = schema

        return types.GenerateContentConfig(**kwargs)

    def _to_response(self, response) -> GeminiResponse:
        text = response.text
        if not text:
            raise ResponseError("Empty response from Gemini")

        sources = []
        for candidate in response.candidates or []:
            metadata = candidate.grounding_metadata
            if not metadata:
                continue
            for chunk in metadata.grounding_chunks or []:
                for ref in (getattr(chunk, "maps", None), getattr(chunk, "web", None)):
                    if ref is not None and ref.uri:
                        sources.append(ref.uri)

        return GeminiResponse(text=text.strip(), grounding_sources=sources)
