"""
User interface events expressed as commands.

Each control of the catalog page maps to one command model:

* ``SubmitQuery``: the search box
* ``SetYearRange``: the min/max year inputs and their filter button
* ``SelectLanguage``: the language selector (``"All"`` clears filters)
* ``SetSort``: the sort selector
* ``Reset``: the reset-filters button

``CatalogController`` owns the single ``Catalog`` instance, applies
commands to it one at a time and then notifies every subscribed
renderer. The HTTP router accepts the same models as request bodies,
discriminated on their ``type`` field.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Annotated, Any, Callable, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

from .loader import load_catalog
from .schemas import (
    ALL_LANGUAGES,
    DEFAULT_COVER_PREFIX,
    BookCard,
    CatalogState,
    CatalogView,
    parse_int,
)
from .store import Catalog, CatalogLoadError

logger = logging.getLogger(__name__)


class SubmitQuery(BaseModel):
    type: Literal["submit_query"] = "submit_query"
    term: str = ""


class SetYearRange(BaseModel):
    """Blank or non-numeric bounds leave that side of the range open."""

    type: Literal["set_year_range"] = "set_year_range"
    min_year: Optional[int] = None
    max_year: Optional[int] = None

    @field_validator("min_year", "max_year", mode="before")
    @classmethod
    def blank_is_open(cls, value: Any) -> Optional[int]:
        return parse_int(value)


class SelectLanguage(BaseModel):
    type: Literal["select_language"] = "select_language"
    language: str = ALL_LANGUAGES


class SetSort(BaseModel):
    type: Literal["set_sort"] = "set_sort"
    criterion: str = "title"


class Reset(BaseModel):
    type: Literal["reset"] = "reset"


AnyCommand = Union[SubmitQuery, SetYearRange, SelectLanguage, SetSort, Reset]
Command = Annotated[AnyCommand, Field(discriminator="type")]

Renderer = Callable[[Catalog], None]


def _submit_query(catalog: Catalog, cmd: SubmitQuery) -> None:
    catalog.filter_by_query(cmd.term)


def _set_year_range(catalog: Catalog, cmd: SetYearRange) -> None:
    catalog.filter_by_year_range(cmd.min_year, cmd.max_year)


def _select_language(catalog: Catalog, cmd: SelectLanguage) -> None:
    catalog.filter_by_language(cmd.language)


def _set_sort(catalog: Catalog, cmd: SetSort) -> None:
    catalog.sort_by(cmd.criterion)


def _reset(catalog: Catalog, cmd: Reset) -> None:
    catalog.reset_to_all()


_HANDLERS: Dict[type, Callable[[Catalog, Any], None]] = {
    SubmitQuery: _submit_query,
    SetYearRange: _set_year_range,
    SelectLanguage: _select_language,
    SetSort: _set_sort,
    Reset: _reset,
}


class CatalogController:
    """Single owner of a ``Catalog``; every access goes through its lock."""

    def __init__(
        self,
        catalog: Optional[Catalog] = None,
        renderers: Optional[List[Renderer]] = None,
        cover_prefix: str = DEFAULT_COVER_PREFIX,
    ) -> None:
        self.catalog = catalog if catalog is not None else Catalog()
        self.cover_prefix = cover_prefix
        self.load_error: Optional[str] = None
        self._renderers: List[Renderer] = list(renderers or [])
        self._lock = threading.Lock()

    def subscribe(self, renderer: Renderer) -> None:
        self._renderers.append(renderer)

    async def load(self, source: Union[str, Path], timeout: float = 10.0) -> int:
        """Load into a fresh catalog and swap it in under the lock.

        A failure installs an empty catalog, records the error and
        re-raises it.
        """
        fresh = Catalog(search_fields=self.catalog.search_fields)
        try:
            count = await load_catalog(fresh, source, timeout=timeout)
        except CatalogLoadError as exc:
            with self._lock:
                self.catalog = fresh
                self.load_error = str(exc)
            raise
        with self._lock:
            self.catalog = fresh
            self.load_error = None
            self._notify()
        return count

    def health(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "status": "ok",
                "loaded": self.catalog.state is not CatalogState.EMPTY,
                "total": self.catalog.total_count(),
            }

    def dispatch(self, command: Any) -> None:
        handler = _HANDLERS.get(type(command))
        if handler is None:
            raise TypeError(f"Unknown catalog command: {type(command).__name__}")
        with self._lock:
            logger.info("Dispatching %r", command)
            handler(self.catalog, command)
            self._notify()

    def snapshot(self) -> CatalogView:
        """Build a response model of the current view."""
        with self._lock:
            catalog = self.catalog
            year_range = catalog.year_range or (None, None)
            return CatalogView(
                state=catalog.state,
                sort=catalog.sort_key,
                query=catalog.query,
                min_year=year_range[0],
                max_year=year_range[1],
                language=catalog.language,
                display_count=catalog.display_count(),
                total_count=catalog.total_count(),
                status=catalog.status_line(),
                items=[BookCard.from_book(b, self.cover_prefix) for b in catalog.current_view()],
            )

    def languages(self) -> List[str]:
        with self._lock:
            return self.catalog.available_languages()

    def render(self, renderer: Callable[[Catalog], Any]) -> Any:
        """Run ``renderer`` against the catalog while holding the lock."""
        with self._lock:
            return renderer(self.catalog)

    def _notify(self) -> None:
        for renderer in self._renderers:
            renderer(self.catalog)
