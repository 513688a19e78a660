"""Web search augmentation: Serper (primary) with DuckDuckGo fallback."""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime

import httpx

from sahulat.models.profile import UserProfile
from sahulat.models.recommendation import SearchResult, WebSearchResponse
from sahulat.tools.html_cleaner import clean_html, clean_snippet

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
SERPER_URL = "https://google.serper.dev/search"
DUCKDUCKGO_URL = "https://api.duckduckgo.com/"
DEFAULT_LOCATION = "Pakistan"

SERPER_RESULTS = 10
DUCKDUCKGO_RELATED_TOPICS = 5
CATEGORY_RESULT_CAP = 10
LATEST_RESULT_CAP = 8
MAX_PARALLEL_QUERIES = 4

NO_PROVIDERS_ERROR = "No search providers available"


# =============================================================================
# Providers
# =============================================================================


def search_with_serper(
    query: str,
    api_key: str | None = None,
    url: str = SERPER_URL,
    timeout: float = DEFAULT_TIMEOUT,
) -> WebSearchResponse:
    """Query the Serper Google Search API. Errors are reported, never raised."""
    api_key = api_key or os.getenv("SERPER_API_KEY")
    if not api_key:
        return WebSearchResponse(success=False, error="Serper API key not configured")

    try:
        response = httpx.post(
            url,
            json={"q": query, "num": SERPER_RESULTS},
            headers={"X-API-KEY": api_key, "Content-Type": "application/json"},
            timeout=timeout,
        )
        response.raise_for_status()
        data = response.json()
    except httpx.TimeoutException:
        logger.warning("Serper request timed out for query: %s", query)
        return WebSearchResponse(success=False, error="Serper request timed out")
    except httpx.HTTPStatusError as e:
        logger.warning("Serper HTTP error %d for query: %s", e.response.status_code, query)
        return WebSearchResponse(success=False, error=f"Serper HTTP error {e.response.status_code}")
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("Serper search failed for query '%s': %s", query, e)
        return WebSearchResponse(success=False, error=f"Serper search failed: {e}")

    if not isinstance(data, dict):
        logger.warning("Unexpected Serper response body for query: %s", query)
        return WebSearchResponse(success=False, error="Serper returned an unexpected response")

    results = []
    for item in _entries(data, "organic"):
        link = _text(item.get("link"))
        if not link:
            continue
        results.append(
            SearchResult(
                title=clean_html(_text(item.get("title"))),
                link=link,
                snippet=clean_snippet(_text(item.get("snippet"))),
                source="Google Search",
                date=_text(item.get("date")) or None,
            )
        )
    return WebSearchResponse(success=True, results=results)


def search_with_duckduckgo(
    query: str,
    url: str = DUCKDUCKGO_URL,
    timeout: float = DEFAULT_TIMEOUT,
) -> WebSearchResponse:
    """Query the DuckDuckGo Instant Answer API. Errors are reported, never raised."""
    try:
        response = httpx.get(
            url,
            params={
                "q": query,
                "format": "json",
                "no_html": 1,
                "skip_disambig": 1,
            },
            timeout=timeout,
        )
        response.raise_for_status()
        data = response.json()
    except httpx.TimeoutException:
        logger.warning("DuckDuckGo request timed out for query: %s", query)
        return WebSearchResponse(success=False, error="DuckDuckGo request timed out")
    except httpx.HTTPStatusError as e:
        logger.warning("DuckDuckGo HTTP error %d for query: %s", e.response.status_code, query)
        return WebSearchResponse(success=False, error=f"DuckDuckGo HTTP error {e.response.status_code}")
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("DuckDuckGo search failed for query '%s': %s", query, e)
        return WebSearchResponse(success=False, error=f"DuckDuckGo search failed: {e}")

    if not isinstance(data, dict):
        logger.warning("Unexpected DuckDuckGo response body for query: %s", query)
        return WebSearchResponse(success=False, error="DuckDuckGo returned an unexpected response")

    results = []
    abstract, abstract_url = _text(data.get("Abstract")), _text(data.get("AbstractURL"))
    if abstract and abstract_url:
        results.append(
            SearchResult(
                title=clean_html(_text(data.get("AbstractSource"))),
                link=abstract_url,
                snippet=clean_snippet(abstract),
                source="DuckDuckGo Instant Answer",
            )
        )

    for topic in _entries(data, "RelatedTopics")[:DUCKDUCKGO_RELATED_TOPICS]:
        text = _text(topic.get("Text"))
        link = _text(topic.get("FirstURL"))
        if not text or not link:
            continue
        results.append(
            SearchResult(
                title=clean_html(text.split(" - ")[0]),
                link=link,
                snippet=clean_snippet(text),
                source="DuckDuckGo Related",
            )
        )
    return WebSearchResponse(success=True, results=results)


def _entries(data: dict, key: str) -> list[dict]:
    """The dict entries of a list field; anything else in the body is ignored."""
    value = data.get(key)
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _text(value) -> str:
    return value if isinstance(value, str) else ""


# =============================================================================
# Provider chain
# =============================================================================


def search_web(
    query: str,
    serper_api_key: str | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    serper_url: str = SERPER_URL,
    duckduckgo_url: str = DUCKDUCKGO_URL,
) -> WebSearchResponse:
    """Try Serper, then DuckDuckGo. Always returns a successful response.

    When neither provider yields results the response is empty and carries an
    explanatory ``error`` tag.
    """
    primary = search_with_serper(query, api_key=serper_api_key, url=serper_url, timeout=timeout)
    if primary.success and primary.results:
        return WebSearchResponse(results=dedupe_results(primary.results))

    secondary = search_with_duckduckgo(query, url=duckduckgo_url, timeout=timeout)
    if secondary.success and secondary.results:
        return WebSearchResponse(results=dedupe_results(secondary.results))

    logger.info(
        "No web results for '%s' (serper: %s, duckduckgo: %s)",
        query, primary.error or "empty", secondary.error or "empty",
    )
    return WebSearchResponse(success=True, results=[], error=NO_PROVIDERS_ERROR)


def dedupe_results(results: list[SearchResult]) -> list[SearchResult]:
    """Drop results whose link was already seen, keeping the first occurrence."""
    seen: set[str] = set()
    unique = []
    for result in results:
        if result.link in seen:
            continue
        seen.add(result.link)
        unique.append(result)
    return unique


def search_many(
    queries: list[str],
    cap: int,
    serper_api_key: str | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    serper_url: str = SERPER_URL,
    duckduckgo_url: str = DUCKDUCKGO_URL,
) -> WebSearchResponse:
    """Run each query through ``search_web`` and merge the results.

    Queries run concurrently; results are concatenated in query order, so
    deduplication keeps the hit from the earliest query.
    """
    with ThreadPoolExecutor(max_workers=min(MAX_PARALLEL_QUERIES, len(queries) or 1)) as pool:
        responses = list(
            pool.map(
                lambda q: search_web(
                    q,
                    serper_api_key=serper_api_key,
                    timeout=timeout,
                    serper_url=serper_url,
                    duckduckgo_url=duckduckgo_url,
                ),
                queries,
            )
        )

    all_results: list[SearchResult] = []
    for response in responses:
        all_results.extend(response.results)

    unique = dedupe_results(all_results)[:cap]
    logger.info(
        "Web search: %d queries, %d results, %d unique kept",
        len(queries), len(all_results), len(unique),
    )
    if not unique:
        return WebSearchResponse(success=True, results=[], error=NO_PROVIDERS_ERROR)
    return WebSearchResponse(results=unique)


# =============================================================================
# Query builders
# =============================================================================


def search_government_programs(
    category: str,
    location: str = DEFAULT_LOCATION,
    serper_api_key: str | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    serper_url: str = SERPER_URL,
    duckduckgo_url: str = DUCKDUCKGO_URL,
    year: int | None = None,
) -> WebSearchResponse:
    """Search a fixed rotation of queries for one program category."""
    year = year or datetime.now().year
    queries = [
        f"{category} government programs {location} {year}",
        f"{category} opportunities {location} official website",
        f"{category} grants {location} government portal",
        f"{category} scholarships {location} latest",
    ]
    return search_many(
        queries,
        CATEGORY_RESULT_CAP,
        serper_api_key=serper_api_key,
        timeout=timeout,
        serper_url=serper_url,
        duckduckgo_url=duckduckgo_url,
    )


def search_latest_opportunities(
    location: str = DEFAULT_LOCATION,
    serper_api_key: str | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    serper_url: str = SERPER_URL,
    duckduckgo_url: str = DUCKDUCKGO_URL,
    year: int | None = None,
) -> WebSearchResponse:
    """Search a fixed rotation of "what's new" queries."""
    year = year or datetime.now().year
    queries = [
        f"latest government programs {location} {year}",
        f"new scholarships {location} official website",
        f"recent government grants {location}",
        f"government opportunities {location} this month",
    ]
    return search_many(
        queries,
        LATEST_RESULT_CAP,
        serper_api_key=serper_api_key,
        timeout=timeout,
        serper_url=serper_url,
        duckduckgo_url=duckduckgo_url,
    )


def build_profile_query(
    profile: UserProfile | None,
    goals: list[str],
    location: str = DEFAULT_LOCATION,
    year: int | None = None,
) -> str:
    """Compose a single query from goal tokens plus profile attributes."""
    year = year or datetime.now().year
    terms = [" ".join(goals)]
    if profile is not None:
        if profile.age:
            terms.append(f"age {profile.age}")
        if profile.education:
            terms.append(f"{profile.education.value} education")
        if profile.location and (profile.location.city or profile.location.province):
            terms.append(profile.location.city or profile.location.province)
        if profile.occupation:
            terms.append(profile.occupation)
    search_terms = " ".join(t for t in terms if t)
    return f"{search_terms} government programs {location} {year} official website"


def search_specific_programs(
    profile: UserProfile | None,
    goals: list[str],
    location: str = DEFAULT_LOCATION,
    serper_api_key: str | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    serper_url: str = SERPER_URL,
    duckduckgo_url: str = DUCKDUCKGO_URL,
) -> WebSearchResponse:
    """Search for programs matching goal tokens and the applicant's profile."""
    query = build_profile_query(profile, goals, location=location)
    response = search_web(
        query,
        serper_api_key=serper_api_key,
        timeout=timeout,
        serper_url=serper_url,
        duckduckgo_url=duckduckgo_url,
    )
    response.results = response.results[:CATEGORY_RESULT_CAP]
    return response
