"""Dependency injection container — wires implementations to interfaces."""
from __future__ import annotations
from functools import lru_cache

from review_app.application.promotion_app_service import PromotionAppService
from review_app.application.review_app_service import ReviewAppService
from review_app.persistence.remote.catalog_mirror import mirror_from_config
from review_app.persistence.repositories.sqlite.sqlite_catalog_store import SqliteCatalogStore
from review_app.persistence.repositories.sqlite.sqlite_content_repository import SqliteContentRepository


@lru_cache(maxsize=1)
def get_content_repo() -> SqliteContentRepository:
    return SqliteContentRepository()


@lru_cache(maxsize=1)
def get_catalog_store() -> SqliteCatalogStore:
    return SqliteCatalogStore()


@lru_cache(maxsize=1)
def get_review_app_service() -> ReviewAppService:
    return ReviewAppService(repo=get_content_repo())


@lru_cache(maxsize=1)
def get_promotion_app_service() -> PromotionAppService:
    return PromotionAppService(
        repo=get_content_repo(),
        catalog=get_catalog_store(),
        mirror=mirror_from_config(),
    )
