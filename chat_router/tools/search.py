"""
DuckDuckGo Web Search Tool

Provides web search via the DuckDuckGo Instant Answer API: a direct
answer abstract (when there is one) followed by related topics.
"""

import logging

import requests

from ..config import config
from .registry import ToolDefinition

logger = logging.getLogger(__name__)

DEFAULT_NUM_RESULTS = 5
MAX_NUM_RESULTS = 10


def _clamp_num_results(num_results) -> int:
    """Coerce a model-supplied result count into 1..MAX_NUM_RESULTS."""
    try:
        value = int(num_results)
    except (TypeError, ValueError):
        return DEFAULT_NUM_RESULTS
    return max(1, min(value, MAX_NUM_RESULTS))


def search_web(query: str, num_results: int = DEFAULT_NUM_RESULTS) -> dict:
    """
    Search the web using DuckDuckGo.

    Args:
        query: The search query
        num_results: Maximum number of results to return (1-10)

    Returns:
        Dictionary with search results
    """
    if not query or not query.strip():
        return {
            "query": query,
            "error": 'Search query is empty. Please provide a search query in format: {"query": "your search terms"}',
            "results": [],
            "total_results": 0,
        }

    limit = _clamp_num_results(num_results)
    params = {
        "q": query,
        "format": "json",
        "no_html": 1,
        "skip_disambig": 1,
    }

    try:
        response = requests.get(
            config.tools.search_url,
            params=params,
            timeout=config.tools.timeout,
        )
        if not response.ok:
            logger.warning(f"Search service returned {response.status_code} for '{query}'")
            return {"query": query, "error": "Search request failed", "results": [], "total_results": 0}

        data = response.json()

        results = []
        if data.get("Abstract"):
            results.append({
                "title": data.get("Heading") or "Summary",
                "snippet": data["Abstract"],
                "url": data.get("AbstractURL", ""),
                "source": data.get("AbstractSource", ""),
            })

        for topic in data.get("RelatedTopics") or []:
            if len(results) >= limit:
                break
            # Grouped topics carry no Text/FirstURL of their own
            text = topic.get("Text")
            first_url = topic.get("FirstURL")
            if text and first_url:
                results.append({
                    "title": text.split(" - ")[0],
                    "snippet": text,
                    "url": first_url,
                })

        return {
            "query": query,
            "results": results[:limit],
            "total_results": len(results[:limit]),
        }

    except requests.exceptions.RequestException as e:
        logger.error(f"Search failed: {e}")
        return {"query": query, "error": f"Search failed: {e}", "results": [], "total_results": 0}
    except (AttributeError, TypeError, ValueError) as e:
        logger.error(f"Unexpected search payload for '{query}': {e}")
        return {"query": query, "error": f"Search failed: unexpected response ({e})", "results": [], "total_results": 0}


def _handle_search(params: dict) -> dict:
    """Handle search_web tool invocation."""
    return search_web(
        query=params.get("query", ""),
        num_results=params.get("num_results", DEFAULT_NUM_RESULTS),
    )


TOOL = ToolDefinition(
    name="search_web",
    description="Search the web for current information",
    parameters={
        "type": "object",
        "properties": {
            "query": {
                "type": "string",
                "description": "The search query",
            },
            "num_results": {
                "type": ["number", "string", "null"],
                "description": "Number of results to return (1-10)",
                "default": DEFAULT_NUM_RESULTS,
            },
        },
        "required": ["query"],
    },
    handler=_handle_search,
)
