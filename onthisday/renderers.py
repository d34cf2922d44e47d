"""Rendering helpers for the story list and detail view."""

from __future__ import annotations

from datetime import date
from typing import Iterable, List, Optional, Sequence

from .dates import month_and_day
from .models import ListItem, PageSummary, StoryRecord
from .templating import get_environment

PAGE_SEPARATOR = "\n---\n"


def _page_section(page: PageSummary) -> str:
    return (
        f"### [{page.title}]({page.page_url})\n\n"
        f"{page.extract}\n\n"
        f"![Image]({page.image_url})\n"
    )


def build_detail_markdown(story: StoryRecord, selected: date) -> str:
    """Render the markdown detail view for a single story."""
    headings = [
        f"## {month_and_day(selected)}, {story.year}",
        f"### {story.title}",
        f"### Related Articles ({len(story.pages)})",
    ]
    pages = PAGE_SEPARATOR.join(_page_section(page) for page in story.pages)
    return "\n".join(headings) + "\n" + pages


def build_list_items(stories: Iterable[StoryRecord], selected: date) -> List[ListItem]:
    """Build one list row per story, in the order given."""
    return [
        ListItem(
            title=story.title,
            year_tag=str(story.year),
            page_count_tag=str(len(story.pages)),
            detail_markdown=build_detail_markdown(story, selected),
        )
        for story in stories
    ]


def filter_items(items: Sequence[ListItem], query: Optional[str]) -> List[ListItem]:
    """Keep items whose title contains ``query``, ignoring case."""
    if not query or not query.strip():
        return list(items)
    needle = query.strip().casefold()
    return [item for item in items if needle in item.title.casefold()]


def build_list_text(
    items: Sequence[ListItem], selected: date, empty_title: str = "No events found"
) -> str:
    """Render the story list as plain text using the Jinja2 template."""
    env = get_environment()
    template = env.get_template("list.txt.j2")
    return template.render(
        section=month_and_day(selected), items=items, empty_title=empty_title
    )


def build_detail_html(markdown: str, title: str = "Wikipedia On This Day") -> str:
    """Render a detail view's markdown as a standalone HTML page."""
    env = get_environment()
    template = env.get_template("detail.html.j2")
    return template.render(body=markdown, title=title)
