"""
In-memory catalog of books and its query pipeline.

The ``Catalog`` keeps two collections: the full set, fixed once
``load()`` succeeds, and the current view, a filtered and ordered list
derived from it. Every filter operation records its criterion and then
rebuilds the view from the *full set* (never from the previous view),
ANDing together all active criteria and re-applying the active sort
key. This keeps repeated filter calls idempotent and order-independent.

The catalog is not thread-safe on its own; ``commands.CatalogController``
serialises access to it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from .schemas import (
    ALL_LANGUAGES,
    SEARCH_FIELDS,
    Book,
    CatalogState,
    SortKey,
    collation_key,
    resolve_search_fields,
)

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Base class for catalog errors."""


class CatalogLoadError(CatalogError):
    """The record source was unavailable or structurally malformed."""


def _number_key(value: Optional[int]) -> Tuple[bool, int]:
    # ``None`` sorts before every number, including negative years.
    return (value is not None, value if value is not None else 0)


SORT_KEYS: Dict[SortKey, Callable[[Book], Any]] = {
    SortKey.TITLE: lambda b: collation_key(b.title),
    SortKey.AUTHOR: lambda b: collation_key(b.author),
    SortKey.YEAR: lambda b: _number_key(b.year),
    SortKey.PAGES: lambda b: _number_key(b.pages),
}


def build_books(records: Any) -> List[Book]:
    """Convert raw records into ``Book`` instances.

    Parameters
    ----------
    records : Any
        An iterable of mappings (decoded JSON objects) or ``Book``
        instances. Strings, bytes and mappings are rejected even though
        they are iterable.

    Returns
    -------
    List[Book]
        The books, in the order supplied.

    Raises
    ------
    CatalogLoadError
        If ``records`` is not an iterable of record-shaped values.
    """
    if isinstance(records, (str, bytes, Mapping)) or not isinstance(records, Iterable):
        raise CatalogLoadError(
            f"Expected a sequence of records, got {type(records).__name__}"
        )
    books: List[Book] = []
    for index, entry in enumerate(records):
        if isinstance(entry, Book):
            books.append(entry)
            continue
        if not isinstance(entry, Mapping):
            raise CatalogLoadError(
                f"Record {index} is a {type(entry).__name__}, not an object"
            )
        try:
            books.append(Book.model_validate(dict(entry)))
        except ValidationError as exc:
            raise CatalogLoadError(f"Record {index} is malformed: {exc}") from exc
    return books


class Catalog:
    """Full record set, active criteria, active sort key and derived view."""

    def __init__(self, search_fields: Sequence[str] = SEARCH_FIELDS) -> None:
        self.search_fields: Tuple[str, ...] = resolve_search_fields(search_fields)
        self._books: Tuple[Book, ...] = ()
        self._positions: Dict[int, int] = {}
        self._view: List[Book] = []
        self.clear()

    # -- loading ---------------------------------------------------------

    def load(self, records: Any) -> int:
        """Replace the full set; the view becomes every record, unsorted.

        On failure the catalog is left empty and ``CatalogLoadError``
        propagates to the caller.
        """
        try:
            books = build_books(records)
        except CatalogLoadError:
            self.clear()
            raise
        self._books = tuple(books)
        self._positions = {id(b): i for i, b in enumerate(self._books)}
        self._view = list(self._books)
        self._state = CatalogState.LOADED
        self._clear_criteria()
        self._sort_key = SortKey.TITLE
        logger.info("Catalog loaded with %d books", len(self._books))
        return len(self._books)

    def clear(self) -> None:
        """Drop every record and return to the empty state."""
        self._books = ()
        self._positions = {}
        self._view = []
        self._state = CatalogState.EMPTY
        self._clear_criteria()
        self._sort_key = SortKey.TITLE

    # -- accessors -------------------------------------------------------

    @property
    def state(self) -> CatalogState:
        return self._state

    @property
    def sort_key(self) -> SortKey:
        return self._sort_key

    @property
    def query(self) -> Optional[str]:
        return self._query

    @property
    def year_range(self) -> Optional[Tuple[Optional[int], Optional[int]]]:
        return self._year_range

    @property
    def language(self) -> Optional[str]:
        return self._language

    @property
    def books(self) -> Tuple[Book, ...]:
        return self._books

    def current_view(self) -> List[Book]:
        return list(self._view)

    def display_count(self) -> int:
        return len(self._view)

    def total_count(self) -> int:
        return len(self._books)

    def status_line(self) -> str:
        return f"Showing {self.display_count()} of {self.total_count()} books"

    def available_languages(self) -> List[str]:
        """Distinct language names across the full set, alphabetically."""
        names = {name for book in self._books for name in book.languages if name}
        return sorted(names, key=collation_key)

    # -- filters ---------------------------------------------------------

    def filter_by_query(self, term: Optional[str]) -> None:
        self._query = term.strip() if term and term.strip() else None
        self._recompute()

    def filter_by_year_range(self, min_year: Optional[int], max_year: Optional[int]) -> None:
        if min_year is None and max_year is None:
            self._year_range = None
        else:
            self._year_range = (min_year, max_year)
        self._recompute()

    def filter_by_language(self, language: Optional[str]) -> None:
        """Filter on one language; ``"All"`` clears every active filter."""
        if language is None or not language.strip() or language == ALL_LANGUAGES:
            self._clear_criteria()
        else:
            self._language = language
        self._recompute()

    # -- ordering --------------------------------------------------------

    def sort_by(self, criterion: Any) -> None:
        """Order the view; unknown criteria fall back to title.

        Does nothing when the view is empty, not even updating the
        active sort key.
        """
        if not self._view:
            return
        self._sort_key = SortKey.coerce(criterion)
        self._apply_sort()
        if self._state is not CatalogState.EMPTY:
            self._state = CatalogState.SORTED

    def reset_to_all(self) -> None:
        self._clear_criteria()
        self._view = list(self._books)
        self._sort_key = SortKey.TITLE
        if self._state is not CatalogState.EMPTY:
            self._state = CatalogState.LOADED

    # -- internals -------------------------------------------------------

    def _clear_criteria(self) -> None:
        self._query: Optional[str] = None
        self._year_range: Optional[Tuple[Optional[int], Optional[int]]] = None
        self._language: Optional[str] = None

    def _matches(self, book: Book) -> bool:
        if self._query is not None and not book.matches_query(self._query, self.search_fields):
            return False
        if self._year_range is not None and not book.is_within_years(*self._year_range):
            return False
        if self._language is not None and not book.has_language(self._language):
            return False
        return True

    def _recompute(self) -> None:
        self._view = [b for b in self._books if self._matches(b)]
        logger.debug(
            "Filtered view: %d of %d books (query=%r, years=%r, language=%r)",
            len(self._view),
            len(self._books),
            self._query,
            self._year_range,
            self._language,
        )
        self._apply_sort()
        if self._state is not CatalogState.EMPTY:
            self._state = CatalogState.FILTERED

    def _apply_sort(self) -> None:
        # Ties fall back to full-set position, whatever order the view had.
        key = SORT_KEYS[self._sort_key]
        positions = self._positions
        self._view.sort(key=lambda b: (key(b), positions.get(id(b), 0)))
