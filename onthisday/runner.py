"""High-level orchestration for the onthisday application."""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import List, Optional, Tuple

from .dates import month_and_day
from .events import (
    DEFAULT_BASE_URL,
    DEFAULT_LANGUAGE,
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
    fetch_events,
)
from .models import ListItem, StoryRecord
from .renderers import build_detail_html, build_list_text, filter_items
from .viewer import DateInput, EventsView, ViewSnapshot, ViewState

logger = logging.getLogger(__name__)


@dataclass
class RunConfig:
    """Runtime options for executing the application."""

    selected: date = field(default_factory=date.today)
    date_input: str = "picker"
    output_format: str = "text"
    story: Optional[int] = None
    search: Optional[str] = None
    output_path: Optional[str] = None
    base_url: str = DEFAULT_BASE_URL
    language: str = DEFAULT_LANGUAGE
    timeout: float = DEFAULT_TIMEOUT
    retries: int = 1
    api_token: Optional[str] = None
    user_agent: str = DEFAULT_USER_AGENT


@dataclass
class RunResult:
    """Returned data after executing the app."""

    output_text: str
    state: ViewState
    stories: Tuple[StoryRecord, ...] = ()
    notifications: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.state is ViewState.LOADED


NO_EVENTS_TITLE = "No events found"


def _select_item(items: List[ListItem], story: int) -> ListItem:
    if story < 1 or story > len(items):
        if not items:
            raise RuntimeError(f"Story {story} does not exist; no stories are listed.")
        raise RuntimeError(
            f"Story {story} does not exist; choose between 1 and {len(items)}."
        )
    return items[story - 1]


def _render_markdown(config: RunConfig, markdown: str) -> str:
    if config.output_format == "html":
        return build_detail_html(markdown)
    return markdown


def _render_empty(config: RunConfig, selected: date, empty_title: str) -> str:
    if config.output_format == "text":
        return build_list_text([], selected, empty_title=empty_title)
    heading = f"# Wikipedia On This Day: {month_and_day(selected)}\n\n"
    return _render_markdown(config, heading + f"## {empty_title}\n")


def _render(config: RunConfig, snapshot: ViewSnapshot) -> str:
    selected = snapshot.selected or config.selected

    if snapshot.state is not ViewState.LOADED:
        return _render_empty(config, selected, snapshot.empty_title)

    items = filter_items(snapshot.items, config.search)
    logger.debug("%d of %d items match the search", len(items), len(snapshot.items))

    if config.story is not None:
        return _render_markdown(config, _select_item(items, config.story).detail_markdown)
    if not items:
        return _render_empty(config, selected, NO_EVENTS_TITLE)
    if config.output_format == "text":
        return build_list_text(items, selected)

    heading = f"# Wikipedia On This Day: {month_and_day(selected)}\n\n"
    return _render_markdown(
        config, heading + "\n\n".join(item.detail_markdown for item in items)
    )


def _write_output(path: str, text: str) -> None:
    location = Path(path)
    if location.parent and not location.parent.exists():
        location.parent.mkdir(parents=True, exist_ok=True)
    location.write_text(text, encoding="utf-8")
    logger.info("Wrote output to %s", location)


def execute(config: RunConfig) -> RunResult:
    """Fetch the events for the configured date and render them."""
    fetcher = functools.partial(
        fetch_events,
        base_url=config.base_url,
        language=config.language,
        timeout=config.timeout,
        retries=config.retries,
        api_token=config.api_token,
        user_agent=config.user_agent,
    )

    notifications: List[Tuple[str, str]] = []

    def notify(title: str, message: str) -> None:
        logger.error("%s: %s", title, message)
        notifications.append((title, message))

    with EventsView(
        fetcher, date_input=DateInput(config.date_input), notifier=notify
    ) as view:
        view.select_date(config.selected).result()
        snapshot = view.snapshot()

    output_text = _render(config, snapshot)

    if config.output_path:
        _write_output(config.output_path, output_text)

    return RunResult(
        output_text=output_text,
        state=snapshot.state,
        stories=snapshot.stories,
        notifications=notifications,
    )
