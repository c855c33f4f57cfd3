"""Exceptions personnalisées pour le module categories."""
from typing import Optional

from .constants import ERROR_CATEGORY_NOT_FOUND, ERROR_CATEGORY_IN_USE

class CategoryDomainException(Exception):
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

class CategoryNotFoundException(CategoryDomainException):
    """Exception levée lorsqu'une catégorie n'est pas trouvée."""
    def __init__(self, category_id: Optional[int] = None):
        self.category_id = category_id
        super().__init__(f"{ERROR_CATEGORY_NOT_FOUND}{f' (ID: {category_id})' if category_id else ''}.")

class DuplicateCategoryNameException(CategoryDomainException):
    """Exception levée lorsqu'une catégorie avec le même nom (ou slug) existe déjà."""
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Une catégorie avec le nom '{name}' existe déjà.")

class CategoryInUseException(CategoryDomainException):
    def __init__(self, category_id: int, products_count: int):
        self.category_id = category_id
        self.products_count = products_count
        super().__init__(f"{ERROR_CATEGORY_IN_USE} ({products_count} produit(s)).")
