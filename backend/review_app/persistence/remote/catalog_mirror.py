"""Mirror promoted catalog entries and courses to a Supabase REST endpoint."""
from __future__ import annotations
from dataclasses import asdict
from typing import Optional

import requests

from review_app.core import config
from review_app.core.logging import get_logger
from review_app.domain.review.models import CatalogEntry, ProductionCourse

logger = get_logger(__name__)


class CatalogMirrorError(Exception):
    """The remote catalog rejected or never received a write."""


CATALOG_TABLE = "catalog_entries"
COURSES_TABLE = "courses"


class CatalogMirror:
    """
    Upserts live records into remote delivery tables.

    Requests use ``resolution=merge-duplicates`` keyed on ``game_id`` / ``slug``,
    so re-publishing the same record on a retried promotion overwrites
    instead of duplicating. Failures raise ``CatalogMirrorError``.
    """

    def __init__(self, base_url: str, api_key: str, timeout: float = 10.0, session: Optional[requests.Session] = None):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()
        self._headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "Prefer": "resolution=merge-duplicates,return=minimal",
        }

    def _upsert(self, table: str, on_conflict: str, payload: dict) -> None:
        try:
            res = self._session.post(
                f"{self._base_url}/rest/v1/{table}",
                params={"on_conflict": on_conflict},
                json=payload,
                headers=self._headers,
                timeout=self._timeout,
            )
            res.raise_for_status()
        except requests.RequestException as e:
            raise CatalogMirrorError(f"Upsert into {table} failed: {e}") from e

    def publish_game(self, entry: CatalogEntry) -> None:
        self._upsert(CATALOG_TABLE, "game_id", asdict(entry))
        logger.info("catalog_mirror_published", table=CATALOG_TABLE, game_id=entry.game_id)

    def publish_course(self, course: ProductionCourse) -> None:
        self._upsert(COURSES_TABLE, "slug", asdict(course))
        logger.info("catalog_mirror_published", table=COURSES_TABLE, slug=course.slug)


def mirror_from_config() -> Optional[CatalogMirror]:
    """Build a mirror from settings, or None when CATALOG_MIRROR_URL is unset."""
    if not config.CATALOG_MIRROR_URL:
        return None
    return CatalogMirror(
        config.CATALOG_MIRROR_URL,
        config.CATALOG_MIRROR_KEY,
        timeout=config.CATALOG_MIRROR_TIMEOUT_SECONDS,
    )
