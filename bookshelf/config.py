"""Configuration management."""
import os
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv

from .catalog.schemas import resolve_search_fields

# Load environment variables
load_dotenv()

DEFAULT_DATA_FILE = Path(__file__).resolve().parent / "data" / "books.json"


def _split_fields(raw: str) -> Tuple[str, ...]:
    return tuple(f.strip() for f in raw.split(",") if f.strip())


class Config:
    """Application configuration, read from the environment.

    Keyword arguments override the environment, which is convenient in
    tests: ``Config(data_source=tmp_path / "books.json")``.
    """

    def __init__(
        self,
        data_source: Optional[str] = None,
        cover_prefix: Optional[str] = None,
        load_timeout: Optional[float] = None,
        search_fields: Optional[Tuple[str, ...]] = None,
        log_level: Optional[str] = None,
    ):
        # Data
        self.DATA_SOURCE = str(
            data_source or os.getenv("BOOKSHELF_DATA_SOURCE", str(DEFAULT_DATA_FILE))
        )
        self.COVER_PREFIX = (
            cover_prefix if cover_prefix is not None
            else os.getenv("BOOKSHELF_COVER_PREFIX", "data/")
        )
        self.LOAD_TIMEOUT = float(
            load_timeout if load_timeout is not None
            else os.getenv("BOOKSHELF_LOAD_TIMEOUT", "10")
        )

        # Search
        self.SEARCH_FIELDS = resolve_search_fields(
            search_fields or _split_fields(
                os.getenv("BOOKSHELF_SEARCH_FIELDS", "title,author,language")
            )
        )

        # Logging
        self.LOG_LEVEL = (log_level or os.getenv("BOOKSHELF_LOG_LEVEL", "INFO")).upper()

    @classmethod
    def from_env(cls) -> "Config":
        """Re-read the environment (and ``.env``) into a fresh config."""
        load_dotenv()
        return cls()
