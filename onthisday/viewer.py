"""View state for browsing events, shared by every date-input style.

A view owns the selected date and the list it displays. Each call to
``select_date`` starts a background fetch tagged with a generation number;
when a fetch finishes, its outcome is applied only if no newer selection
has been made in the meantime, so a slow response for an old date can never
overwrite the list for the current one.
"""

from __future__ import annotations

import concurrent.futures
import logging
import threading
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from .dates import valid_dates
from .events import FetchError
from .models import ListItem, StoryRecord
from .renderers import build_list_items

logger = logging.getLogger(__name__)

FAILURE_TITLE = "Failed to load Wikipedia stories"

Fetcher = Callable[[date], Sequence[StoryRecord]]
Notifier = Callable[[str, str], None]


class DateInput(str, Enum):
    """How the user picks a date."""

    PICKER = "picker"          # any calendar date
    DROPDOWN = "dropdown"      # one of the pre-enumerated valid dates


class ViewState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


@dataclass(frozen=True)
class ViewSnapshot:
    """Consistent copy of the view's state at one point in time."""

    selected: Optional[date]
    state: ViewState
    stories: Tuple[StoryRecord, ...] = ()
    items: Tuple[ListItem, ...] = ()
    error: Optional[str] = None

    @property
    def empty_title(self) -> Optional[str]:
        """Title of the empty-state placeholder, or None when items are shown."""
        if self.state is ViewState.LOADING:
            return "Loading..."
        if self.state is ViewState.ERROR:
            return "An error occurred"
        if not self.items:
            return "No events found"
        return None


class EventsView:
    def __init__(
        self,
        fetcher: Fetcher,
        date_input: DateInput = DateInput.PICKER,
        notifier: Optional[Notifier] = None,
        executor: Optional[concurrent.futures.Executor] = None,
        year: Optional[int] = None,
    ) -> None:
        self._fetcher = fetcher
        self.date_input = DateInput(date_input)
        self._notifier = notifier
        self._owns_executor = executor is None
        self._executor = executor or concurrent.futures.ThreadPoolExecutor(
            max_workers=4, thread_name_prefix="onthisday-fetch"
        )
        self._choices: Optional[List[date]] = (
            valid_dates(year) if self.date_input is DateInput.DROPDOWN else None
        )

        self._lock = threading.Lock()
        self._generation = 0
        self._selected: Optional[date] = None
        self._state = ViewState.IDLE
        self._stories: Tuple[StoryRecord, ...] = ()
        self._items: Tuple[ListItem, ...] = ()
        self._error: Optional[str] = None

    @property
    def choices(self) -> Optional[List[date]]:
        """Dates offered by the dropdown, or None for a free picker."""
        return list(self._choices) if self._choices is not None else None

    def select_date(self, selected: date) -> concurrent.futures.Future:
        """Make ``selected`` the current date and start fetching its events.

        The returned future resolves to True when the fetch outcome was
        applied to the view and False when a newer selection superseded it.
        """
        if self._choices is not None and selected not in self._choices:
            raise ValueError(f"{selected.isoformat()} is not one of the available dates")

        with self._lock:
            self._generation += 1
            generation = self._generation
            self._selected = selected
            self._state = ViewState.LOADING
            self._stories = ()
            self._items = ()
            self._error = None

        logger.debug("Selected %s (generation %d)", selected, generation)
        return self._executor.submit(self._load, generation, selected)

    def refresh(self) -> concurrent.futures.Future:
        """Fetch the current date again."""
        with self._lock:
            selected = self._selected
        if selected is None:
            raise RuntimeError("No date has been selected yet.")
        return self.select_date(selected)

    def snapshot(self) -> ViewSnapshot:
        with self._lock:
            return ViewSnapshot(
                selected=self._selected,
                state=self._state,
                stories=self._stories,
                items=self._items,
                error=self._error,
            )

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=True)

    def __enter__(self) -> "EventsView":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _load(self, generation: int, selected: date) -> bool:
        try:
            stories = tuple(self._fetcher(selected))
            items = tuple(build_list_items(stories, selected))
        except FetchError as exc:
            logger.warning("Failed to load events for %s: %s", selected, exc)
            return self._apply_failure(generation, selected, str(exc))
        except Exception as exc:
            logger.exception("Unexpected error loading events for %s", selected)
            return self._apply_failure(generation, selected, str(exc))

        with self._lock:
            if generation != self._generation:
                logger.debug(
                    "Discarding stale events for %s (generation %d, current %d)",
                    selected,
                    generation,
                    self._generation,
                )
                return False
            self._state = ViewState.LOADED
            self._stories = stories
            self._items = items

        logger.info("Showing %d events for %s", len(items), selected)
        return True

    def _apply_failure(self, generation: int, selected: date, message: str) -> bool:
        with self._lock:
            if generation != self._generation:
                logger.debug("Discarding stale failure for %s", selected)
                return False
            self._state = ViewState.ERROR
            self._stories = ()
            self._items = ()
            self._error = message

        if self._notifier is not None:
            self._notifier(FAILURE_TITLE, message)
        return True
