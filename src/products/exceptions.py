"""Exceptions du domaine Product."""

class ProductDomainException(Exception):
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

class ProductNotFoundException(ProductDomainException):
    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product not found (ID: {product_id})")

class InvalidProductDataException(ProductDomainException):
    """Données produit invalides (prix, catégorie, marque...)."""
    pass

class ProductInUseException(ProductDomainException):
    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__("Cannot delete a product that belongs to existing orders. Archive it instead.")
