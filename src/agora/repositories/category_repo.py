"""Data access helpers for categories."""
from __future__ import annotations

from collections.abc import Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from agora.core.errors import ValidationError
from agora.models.category import Category
from agora.repositories.errors import storage_guard

__all__ = ["CategoryRepository", "MAX_CATEGORY_NAME_LENGTH"]

MAX_CATEGORY_NAME_LENGTH = 50


def _clean_name(name: str) -> str:
    cleaned = name.strip()
    if not cleaned:
        raise ValidationError("Category name cannot be empty")
    if len(cleaned) > MAX_CATEGORY_NAME_LENGTH:
        raise ValidationError(
            f"Category name must be at most {MAX_CATEGORY_NAME_LENGTH} characters"
        )
    return cleaned


class CategoryRepository:
    """Name to id resolution with implicit creation."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def _find_id(self, name: str) -> int | None:
        return self.session.execute(
            select(Category.id).where(Category.name == name)
        ).scalar_one_or_none()

    def _insert(self, name: str) -> int:
        """Insert ``name``; if another writer created it first, reuse that row."""
        try:
            with self.session.begin_nested():
                category = Category(name=name)
                self.session.add(category)
                self.session.flush()
                return category.id
        except IntegrityError:
            existing = self._find_id(name)
            if existing is None:
                raise
            return existing

    def resolve_or_create(self, names: Iterable[str]) -> list[int]:
        """Return one category id per name, in input order, creating missing ones."""
        cleaned = [_clean_name(name) for name in names]
        ids: list[int] = []
        with storage_guard("resolve categories"):
            for name in cleaned:
                category_id = self._find_id(name)
                if category_id is None:
                    category_id = self._insert(name)
                ids.append(category_id)
        return ids

    def names_for_ids(self, category_ids: Sequence[int]) -> list[str]:
        """Return the names for ``category_ids`` sorted by name.

        Raises:
            StorageError: If the lookup fails; callers decide whether to degrade.
        """
        if not category_ids:
            return []
        with storage_guard("fetch category names"):
            rows = self.session.execute(
                select(Category.name)
                .where(Category.id.in_(list(category_ids)))
                .order_by(Category.name)
            ).scalars()
            return list(rows)

    def list_all(self) -> list[Category]:
        with storage_guard("list categories"):
            return list(
                self.session.execute(select(Category).order_by(Category.name)).scalars()
            )

    def create(self, name: str) -> Category:
        """Create a category by name, returning the existing one if present."""
        category_id = self.resolve_or_create([name])[0]
        return self.session.get(Category, category_id)

    def name_map(self, category_ids: Iterable[int]) -> dict[int, str]:
        """Return ``{id: name}`` for all ``category_ids`` in a single query."""
        unique_ids = sorted(set(category_ids))
        if not unique_ids:
            return {}
        with storage_guard("fetch category names"):
            rows = self.session.execute(
                select(Category.id, Category.name).where(Category.id.in_(unique_ids))
            ).all()
        return {category_id: name for category_id, name in rows}
