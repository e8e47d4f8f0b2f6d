"""
Web search capability backed by an OpenAI model with the web-search tool.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import openai
from openai import AsyncOpenAI

from bidfinder.core.errors import UpstreamUnavailableError
from bidfinder.core.settings import Settings, get_settings

logger = logging.getLogger(__name__)


SEARCH_PROMPT = """Search for: "{query}"

Find government contracts, RFPs, grants, and solicitations that are CURRENTLY OPEN (not expired).

After searching, respond with ONLY a JSON array containing the opportunities found. No other text.

Each opportunity should have:
{{
  "title": "exact name of opportunity",
  "agency": "issuing organization",
  "dueDate": "YYYY-MM-DD or null",
  "estimatedValue": "dollar amount or Not specified",
  "description": "brief summary",
  "sourceUrl": "URL",
  "rfpNumber": "solicitation number or null",
  "level": "federal/state/county/city",
  "source": "where found (SAM.gov, Grants.gov, state portal, etc)"
}}

Never invent a due date or a dollar value; use null or "Not specified" when the listing does not state one.

If no opportunities found, respond with: []"""


def build_search_prompt(query: str) -> str:
    return SEARCH_PROMPT.format(query=query)


@dataclass
class SearchToolResponse:
    """Output of one search call: structured results and/or prose."""
    structured_items: List[Dict[str, Any]] = field(default_factory=list)  # {title, url, snippet}
    text_blocks: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.structured_items and not any(b.strip() for b in self.text_blocks)


class SearchCapability(ABC):
    """External search tool. Garbled or empty output is an empty response."""

    @abstractmethod
    async def invoke(self, prompt: str, tools_enabled: bool = True) -> SearchToolResponse:
        """
        Run one search request.

        Raises:
            UpstreamUnavailableError: the service could not be reached
        """


class OpenAIWebSearch(SearchCapability):
    """Search through the OpenAI Responses API with the web-search tool."""

    def __init__(self, settings: Optional[Settings] = None, client: Optional[AsyncOpenAI] = None):
        """
        Initialize the search client.

        Args:
            settings: Model and tool configuration (default: from environment)
            client: Pre-built AsyncOpenAI client, mainly for tests
        """
        settings = settings or get_settings()

        if client is None:
            if not settings.openai_api_key:
                raise ValueError(
                    "OPENAI_API_KEY environment variable not set. "
                    "Get your key from: https://platform.openai.com/api-keys"
                )
            client = AsyncOpenAI(api_key=settings.openai_api_key)

        self.client = client
        self.model = settings.search_model
        self.tool_type = settings.web_search_tool
        logger.info(f"Web search client initialized with model: {self.model}")

    async def invoke(self, prompt: str, tools_enabled: bool = True) -> SearchToolResponse:
        kwargs: Dict[str, Any] = {"model": self.model, "input": prompt}
        if tools_enabled:
            kwargs["tools"] = [{"type": self.tool_type}]

        try:
            response = await self.client.responses.create(**kwargs)
        except openai.APIError as e:
            logger.error(f"Web search request failed: {e}")
            raise UpstreamUnavailableError("Web search unavailable") from e

        return parse_response(response)


def parse_response(response: Any) -> SearchToolResponse:
    """
    Split a Responses API result into citations and text blocks.

    URL citations become structured items; each output_text becomes a text
    block. Anything unexpected is skipped.
    """
    result = SearchToolResponse()

    for item in getattr(response, "output", None) or []:
        if getattr(item, "type", None) != "message":
            continue
        for content in getattr(item, "content", None) or []:
            if getattr(content, "type", None) != "output_text":
                continue
            text = getattr(content, "text", None) or ""
            if text.strip():
                result.text_blocks.append(text)
            for annotation in getattr(content, "annotations", None) or []:
                if getattr(annotation, "type", None) != "url_citation":
                    continue
                start = getattr(annotation, "start_index", None)
                end = getattr(annotation, "end_index", None)
                snippet = text[start:end] if isinstance(start, int) and isinstance(end, int) else ""
                result.structured_items.append({
                    "title": getattr(annotation, "title", None) or "",
                    "url": getattr(annotation, "url", None) or "",
                    "snippet": snippet,
                })

    logger.debug(
        f"Web search returned {len(result.structured_items)} citations, "
        f"{len(result.text_blocks)} text blocks"
    )
    return result
