"""
Route definitions for the catalogue API.

Endpoints under /api/catalog:
- GET  /books      : the current view (cards, counts, active filters and sort)
- GET  /languages  : language names available to the language selector
- POST /commands   : apply one command (search, year range, language, sort, reset)

The routes share the single ``CatalogController`` created by
``bookshelf.main.create_app`` and stored on ``app.state``.
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Body, Depends, HTTPException, Request

from .commands import AnyCommand, CatalogController
from .schemas import CatalogView

router = APIRouter(prefix="/api/catalog", tags=["catalog"])


def get_controller(request: Request) -> CatalogController:
    return request.app.state.controller


def loaded_controller(controller: CatalogController = Depends(get_controller)) -> CatalogController:
    if controller.load_error is not None:
        raise HTTPException(
            status_code=503,
            detail=f"Error loading book data: {controller.load_error}",
        )
    return controller


@router.get("/books", response_model=CatalogView)
def list_books(controller: CatalogController = Depends(loaded_controller)) -> CatalogView:
    return controller.snapshot()


@router.get("/languages", response_model=List[str])
def list_languages(controller: CatalogController = Depends(loaded_controller)) -> List[str]:
    return controller.languages()


@router.post("/commands", response_model=CatalogView)
def apply_command(
    command: AnyCommand = Body(..., discriminator="type"),
    controller: CatalogController = Depends(loaded_controller),
) -> CatalogView:
    """Apply one command and return the resulting view.

    The body is discriminated on ``type``, for example
    ``{"type": "set_year_range", "min_year": 1900, "max_year": 1950}``.
    """
    controller.dispatch(command)
    return controller.snapshot()
