"""Abstract interface for the live stores that promotion writes into."""
from __future__ import annotations
import sqlite3
from abc import ABC, abstractmethod
from typing import Optional

from review_app.domain.review.models import CatalogEntry, ProductionCourse


class CatalogStore(ABC):

    @abstractmethod
    def add_game_entry(self, conn: sqlite3.Connection, entry: CatalogEntry) -> None:
        """Insert a public catalog entry inside the caller's transaction."""
        ...

    @abstractmethod
    def add_course(self, conn: sqlite3.Connection, course: ProductionCourse) -> None:
        """Insert a production course and all its lessons inside the caller's transaction."""
        ...

    @abstractmethod
    def remove_game_entry(self, conn: sqlite3.Connection, game_id: str) -> None:
        """Delete a catalog entry written by a promotion that is being undone."""
        ...

    @abstractmethod
    def remove_course(self, conn: sqlite3.Connection, course_id: str) -> None:
        """Delete a production course and its lessons written by a promotion that is being undone."""
        ...

    @abstractmethod
    def get_game_entry(self, game_id: str) -> Optional[CatalogEntry]:
        ...

    @abstractmethod
    def get_course(self, course_id: str) -> Optional[ProductionCourse]:
        """Return the production course with its lessons ordered, or None."""
        ...
