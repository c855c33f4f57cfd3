# src/categories/interfaces/repositories.py
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from src.categories.models import Category, CategoryRead


class AbstractCategoryRepository(ABC):
    """Interface abstraite pour le repository des catégories."""

    @abstractmethod
    async def get_by_id(self, category_id: int) -> Optional[CategoryRead]:
        pass

    @abstractmethod
    async def get_by_name(self, name: str) -> Optional[CategoryRead]:
        pass

    @abstractmethod
    async def get_by_slug(self, slug: str) -> Optional[CategoryRead]:
        pass

    @abstractmethod
    async def list(self, limit: int = 100, offset: int = 0, active_only: bool = False) -> Tuple[List[CategoryRead], int]:
        """Liste les catégories avec pagination (triées par nom)."""
        pass

    @abstractmethod
    async def create(self, data: dict) -> CategoryRead:
        pass

    @abstractmethod
    async def update(self, category_id: int, data: dict) -> Optional[CategoryRead]:
        pass

    @abstractmethod
    async def delete(self, category_id: int) -> None:
        pass

    @abstractmethod
    async def count_products(self, category_id: int) -> int:
        """Nombre de produits rattachés à la catégorie."""
        pass
