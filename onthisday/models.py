"""Shared data models for onthisday."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class PageSummary:
    """One article referenced by a historical event."""

    title: str
    extract: str
    page_url: str
    image_url: str = ""


@dataclass(frozen=True)
class StoryRecord:
    """A single historical event for the selected date."""

    year: int
    title: str
    pages: List[PageSummary] = field(default_factory=list)


@dataclass(frozen=True)
class ListItem:
    """Display row for a story, carrying its rendered detail view."""

    title: str
    year_tag: str
    page_count_tag: str
    detail_markdown: str
