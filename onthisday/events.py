"""Fetching and parsing of the Wikimedia "on this day" feed."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, List, Optional

import requests

from .models import PageSummary, StoryRecord

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.wikimedia.org"
DEFAULT_LANGUAGE = "en"
DEFAULT_TIMEOUT = 10.0
DEFAULT_USER_AGENT = "onthisday/0.1 (https://github.com/onthisday/onthisday)"


class FetchError(Exception):
    """Base error for anything that prevents a list of stories being produced."""


class NetworkError(FetchError):
    """The request failed or the server answered with an error status."""


class ParseError(FetchError):
    """The response body did not have the expected shape."""


def build_feed_url(
    selected: date,
    base_url: str = DEFAULT_BASE_URL,
    language: str = DEFAULT_LANGUAGE,
) -> str:
    """Return the featured-content endpoint for the given date."""
    return (
        f"{base_url.rstrip('/')}/feed/v1/wikipedia/{language}/featured/"
        f"{selected.year}/{selected.month:02d}/{selected.day:02d}"
    )


def parse_page(payload: Any) -> PageSummary:
    """Project a page object from the feed into a PageSummary.

    Raises ``ParseError`` when a required field is missing or not a string.
    A missing or unusable thumbnail is not an error and yields an empty
    ``image_url``.
    """
    if not isinstance(payload, dict):
        raise ParseError("Page entry is not an object")

    try:
        title = payload["normalizedtitle"]
        extract = payload["extract"]
        page_url = payload["content_urls"]["desktop"]["page"]
    except (KeyError, TypeError) as exc:
        raise ParseError(f"Page entry is missing field {exc}") from exc

    for name, value in (
        ("normalizedtitle", title),
        ("extract", extract),
        ("content_urls.desktop.page", page_url),
    ):
        if not isinstance(value, str):
            raise ParseError(f"Page field {name} is not a string")

    thumbnail = payload.get("thumbnail")
    image_url = thumbnail.get("source") if isinstance(thumbnail, dict) else None
    if not isinstance(image_url, str):
        image_url = ""

    return PageSummary(
        title=title,
        extract=extract,
        page_url=page_url,
        image_url=image_url,
    )


def _parse_story(payload: Any, position: int) -> StoryRecord:
    if not isinstance(payload, dict):
        raise ParseError(f"Event #{position} is not an object")

    text = payload.get("text")
    year = payload.get("year")
    pages = payload.get("pages")

    if not isinstance(text, str):
        raise ParseError(f"Event #{position} has no text")
    if isinstance(year, bool) or not isinstance(year, int):
        raise ParseError(f"Event #{position} has no integer year")
    if not isinstance(pages, list):
        raise ParseError(f"Event #{position} has no pages list")

    summaries: List[PageSummary] = []
    for page in pages:
        try:
            summaries.append(parse_page(page))
        except ParseError as exc:
            logger.warning("Skipping malformed page in event #%d: %s", position, exc)

    return StoryRecord(year=year, title=text, pages=summaries)


def parse_events(payload: Any) -> List[StoryRecord]:
    """Convert a decoded feed response into story records, keeping API order."""
    if not isinstance(payload, dict):
        raise ParseError("Response body is not a JSON object")

    events = payload.get("onthisday")
    if events is None:
        raise ParseError("Response has no 'onthisday' section")
    if not isinstance(events, list):
        raise ParseError("'onthisday' section is not a list")

    return [_parse_story(item, index) for index, item in enumerate(events)]


def fetch_events(
    selected: date,
    *,
    base_url: str = DEFAULT_BASE_URL,
    language: str = DEFAULT_LANGUAGE,
    timeout: float = DEFAULT_TIMEOUT,
    retries: int = 1,
    api_token: Optional[str] = None,
    user_agent: str = DEFAULT_USER_AGENT,
    session: Optional[requests.Session] = None,
) -> List[StoryRecord]:
    """Fetch the events that happened on ``selected``'s month and day.

    Connection errors and timeouts are retried ``retries`` times; HTTP error
    statuses are not. Raises ``NetworkError`` or ``ParseError``.
    """
    url = build_feed_url(selected, base_url=base_url, language=language)
    headers = {"User-Agent": user_agent, "Accept": "application/json"}
    if api_token:
        headers["Authorization"] = f"Bearer {api_token}"

    http = session or requests
    attempts = max(retries, 0) + 1
    response = None

    for attempt in range(1, attempts + 1):
        logger.info("Fetching events for %s (%s), attempt %d", selected, url, attempt)
        try:
            response = http.get(url, headers=headers, timeout=timeout)
            break
        except (requests.ConnectionError, requests.Timeout) as exc:
            if attempt == attempts:
                raise NetworkError(f"Request to {url} failed: {exc}") from exc
            logger.warning("Transient failure fetching %s: %s; retrying", url, exc)
        except requests.RequestException as exc:
            raise NetworkError(f"Request to {url} failed: {exc}") from exc

    try:
        response.raise_for_status()
    except requests.HTTPError as exc:
        raise NetworkError(f"Server returned an error for {url}: {exc}") from exc

    try:
        payload = response.json()
    except ValueError as exc:
        raise ParseError(f"Response from {url} is not valid JSON") from exc

    stories = parse_events(payload)
    logger.info("Collected %d events for %s", len(stories), selected)
    return stories
