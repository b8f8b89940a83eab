"""
Pydantic schema definitions for the catalog module.

The ``Book`` model is the catalog record: one immutable item built from
a raw JSON entry. Its predicate methods (``matches_query``,
``is_within_years``, ``has_language``) are what the ``Catalog`` in
``store`` composes into a view, so they must never raise, whatever
combination of fields is missing or malformed in the source data.
Malformed values are coerced on construction instead of rejected.

``BookCard`` and ``CatalogView`` are the response shapes served by the
router: a card carries the resolved cover URL, a view bundles the
ordered cards with the "Showing X of Y" counts.
"""

from __future__ import annotations

import re
import unicodedata
from enum import Enum
from typing import Any, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Fields searched by ``Book.matches_query`` unless the caller narrows them.
SEARCH_FIELDS: Tuple[str, ...] = ("title", "author", "language")

# Separator used by the source data to join several language names.
LANGUAGE_SEPARATOR = ", "

# Selecting this value in the language filter clears every filter.
ALL_LANGUAGES = "All"

DEFAULT_COVER_PREFIX = "data/"

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class SortKey(str, Enum):
    """Closed set of orderings the catalog can apply to its view."""

    TITLE = "title"
    AUTHOR = "author"
    YEAR = "year"
    PAGES = "pages"

    @classmethod
    def coerce(cls, value: Any) -> "SortKey":
        """Map user input onto a sort key, falling back to ``TITLE``."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            return cls.TITLE


class CatalogState(str, Enum):
    EMPTY = "empty"
    LOADED = "loaded"
    FILTERED = "filtered"
    SORTED = "sorted"


def parse_int(value: Any) -> Optional[int]:
    """Parse a leading integer the way a lenient form field would.

    Integers pass through, whole floats are truncated, strings such as
    ``"1850"``, ``" -1200"`` or ``"1605 (part 1)"`` yield their leading
    integer. Anything else (``None``, booleans, empty or non-numeric
    text, fractional floats) yields ``None``.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    m = _LEADING_INT.match(str(value))
    if not m:
        return None
    try:
        return int(m.group(1))
    except ValueError:
        # Digit strings past the interpreter's int conversion limit.
        return None


def resolve_search_fields(fields: Optional[Sequence[str]]) -> Tuple[str, ...]:
    """Keep the known searchable field names; default when none remain."""
    known = tuple(name for name in (fields or ()) if name in SEARCH_FIELDS)
    return known or SEARCH_FIELDS


def _clean_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = value if isinstance(value, str) else str(value)
    return text if text.strip() else None


def _norm(s: Optional[str]) -> str:
    return (s or "").strip().lower()


def collation_key(value: Optional[str]) -> Tuple[str, str, str]:
    """Return a sort key that orders text the way a reader expects.

    The first level ignores accents and case (so ``"a"`` sorts before
    ``"B"``), the second puts unaccented letters before accented ones and
    the third puts lower case before upper case. ``None`` behaves like an
    empty string and therefore sorts first.
    """
    text = value or ""
    decomposed = unicodedata.normalize("NFKD", text)
    base = "".join(c for c in decomposed if not unicodedata.combining(c))
    return (base.casefold(), text.casefold(), text.swapcase())


class Book(BaseModel):
    """A single catalog record.

    Instances are frozen: assigning to a field raises. Text fields that
    are missing or blank are stored as ``None``; ``year`` and ``pages``
    hold the parsed integer or ``None`` when the source value was absent
    or unparseable. ``language`` keeps the source's delimited form
    (``"English, French"``); use ``languages`` for the split tokens.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    title: Optional[str] = None
    author: Optional[str] = None
    year: Optional[int] = None
    language: Optional[str] = None
    country: Optional[str] = None
    pages: Optional[int] = None
    image_link: Optional[str] = Field(default=None, alias="imageLink")
    link: Optional[str] = None

    @field_validator("title", "author", "country", "image_link", "link", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> Optional[str]:
        return _clean_text(value)

    @field_validator("language", mode="before")
    @classmethod
    def coerce_language(cls, value: Any) -> Optional[str]:
        if isinstance(value, (list, tuple)):
            value = LANGUAGE_SEPARATOR.join(str(v).strip() for v in value if v is not None)
        return _clean_text(value)

    @field_validator("year", "pages", mode="before")
    @classmethod
    def coerce_int(cls, value: Any) -> Optional[int]:
        return parse_int(value)

    @property
    def languages(self) -> Tuple[str, ...]:
        if not self.language:
            return ()
        return tuple(self.language.split(LANGUAGE_SEPARATOR))

    def matches_query(self, term: Optional[str], fields: Sequence[str] = SEARCH_FIELDS) -> bool:
        """Case-insensitive substring search.

        Parameters
        ----------
        term : Optional[str]
            The text typed by the user. ``None``, empty and
            whitespace-only terms match every book.
        fields : Sequence[str]
            Names of the text fields searched; a book matches when any
            of them contains the normalized term. Pass ``("title",)``
            to restrict the search to titles.

        Returns
        -------
        bool
            ``True`` when the book should stay in the view.
        """
        needle = _norm(term)
        if not needle:
            return True
        for name in fields:
            value = getattr(self, name, None)
            if isinstance(value, str) and needle in value.lower():
                return True
        return False

    def is_within_years(self, min_year: Optional[int], max_year: Optional[int]) -> bool:
        """Inclusive year-range membership.

        A ``None`` bound leaves that side open. Books without a parsed
        year never fall inside a range. Inverted bounds are not checked,
        so ``min_year > max_year`` excludes every book.
        """
        if self.year is None:
            return False
        if min_year is not None and self.year < min_year:
            return False
        if max_year is not None and self.year > max_year:
            return False
        return True

    def has_language(self, language: Optional[str]) -> bool:
        """Exact, case-sensitive match against one of the language tokens."""
        if not self.language or language is None:
            return False
        return language in self.languages

    def resolve_cover_url(self, prefix: str = DEFAULT_COVER_PREFIX) -> str:
        """Return the cover image path, or ``""`` when the book has none."""
        if not self.image_link:
            return ""
        return f"{prefix}{self.image_link}"


class BookCard(BaseModel):
    """A book as sent to the front-end, with its cover URL resolved."""

    title: Optional[str] = None
    author: Optional[str] = None
    year: Optional[int] = None
    language: Optional[str] = None
    languages: List[str] = Field(default_factory=list)
    country: Optional[str] = None
    pages: Optional[int] = None
    cover_url: str = ""
    link: Optional[str] = None

    @classmethod
    def from_book(cls, book: Book, cover_prefix: str = DEFAULT_COVER_PREFIX) -> "BookCard":
        return cls(
            title=book.title,
            author=book.author,
            year=book.year,
            language=book.language,
            languages=list(book.languages),
            country=book.country,
            pages=book.pages,
            cover_url=book.resolve_cover_url(cover_prefix),
            link=book.link,
        )


class CatalogView(BaseModel):
    """The current view plus the counts needed for the status line."""

    state: CatalogState
    sort: SortKey
    query: Optional[str] = None
    min_year: Optional[int] = None
    max_year: Optional[int] = None
    language: Optional[str] = None
    display_count: int
    total_count: int
    status: str
    items: List[BookCard]
