"""Exceptions du domaine Cart."""

class CartDomainException(Exception):
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

class CartNotFoundException(CartDomainException):
    def __init__(self):
        super().__init__("Cart not found")

class CartItemNotFoundException(CartDomainException):
    def __init__(self, item_id: int):
        self.item_id = item_id
        super().__init__(f"Cart item not found (ID: {item_id})")

class ProductUnavailableException(CartDomainException):
    """Produit archivé ou non public."""
    pass

class InsufficientStockException(CartDomainException):
    def __init__(self, message: str = "Not enough stock"):
        super().__init__(message)
