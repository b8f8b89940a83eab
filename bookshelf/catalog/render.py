"""
HTML rendering of the catalog view as book cards.

``render_page`` is a pure function of the catalog; ``CardRenderer`` wraps
it as an observer for ``CatalogController`` and keeps the markup of the
last render.
"""

from __future__ import annotations

import html
from typing import Optional

from .schemas import DEFAULT_COVER_PREFIX, Book
from .store import Catalog

PLACEHOLDER_COVER = "https://via.placeholder.com/300x450?text=No+Cover+Available"
NO_RESULTS_MESSAGE = "No books match your search criteria."
LOAD_ERROR_MESSAGE = "Error loading book data. Please try again later."


def _field(value: object) -> str:
    return html.escape("" if value is None else str(value))


def render_card(book: Book, cover_prefix: str = DEFAULT_COVER_PREFIX) -> str:
    cover = book.resolve_cover_url(cover_prefix) or PLACEHOLDER_COVER
    title = _field(book.title)
    rows = [
        ("Author", book.author),
        ("Year", book.year),
        ("Language", book.language),
        ("Country", book.country),
        ("Pages", book.pages),
    ]
    items = "\n".join(
        f'      <li title="{_field(value)}"><strong>{label}:</strong> {_field(value)}</li>'
        for label, value in rows
    )
    return (
        '<div class="card">\n'
        '  <div class="card-content">\n'
        f'    <h2 title="{title}">{title}</h2>\n'
        f'    <img src="{html.escape(cover)}" alt="{title} Cover">\n'
        "    <ul>\n"
        f"{items}\n"
        "    </ul>\n"
        "  </div>\n"
        "</div>"
    )


def render_cards(catalog: Catalog, cover_prefix: str = DEFAULT_COVER_PREFIX) -> str:
    view = catalog.current_view()
    if not view:
        return f'<div class="no-results">{NO_RESULTS_MESSAGE}</div>'
    return "\n".join(render_card(book, cover_prefix) for book in view)


def render_page(
    catalog: Catalog,
    cover_prefix: str = DEFAULT_COVER_PREFIX,
    load_error: Optional[str] = None,
) -> str:
    """Render the card container and the "Showing X of Y books" line."""
    if load_error is not None:
        body = f'<div class="no-results">{LOAD_ERROR_MESSAGE}</div>'
    else:
        body = render_cards(catalog, cover_prefix)
    return (
        "<!DOCTYPE html>\n"
        "<html>\n<head><meta charset=\"utf-8\"><title>Book Catalog</title></head>\n"
        "<body>\n"
        f'<p id="book-count">{html.escape(catalog.status_line())}</p>\n'
        f'<div id="card-container">\n{body}\n</div>\n'
        "</body>\n</html>\n"
    )


class CardRenderer:
    """Observer that re-renders the card page after every command."""

    def __init__(self, cover_prefix: str = DEFAULT_COVER_PREFIX) -> None:
        self.cover_prefix = cover_prefix
        self.html = ""
        self.renders = 0

    def __call__(self, catalog: Catalog) -> None:
        self.html = render_page(catalog, self.cover_prefix)
        self.renders += 1
