"""FastAPI dependency helpers."""
from __future__ import annotations

from ..config import get_settings
from ..domain.bible_service import BibleService


def get_bible_service() -> BibleService:
    return BibleService(get_settings())


__all__ = ["get_bible_service"]
