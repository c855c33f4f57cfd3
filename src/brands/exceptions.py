"""Exceptions du module brands."""

class BrandDomainException(Exception):
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

class BrandNotFoundException(BrandDomainException):
    def __init__(self, brand_id: int):
        self.brand_id = brand_id
        super().__init__(f"Marque avec ID {brand_id} non trouvée.")

class DuplicateBrandNameException(BrandDomainException):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Une marque avec le nom '{name}' existe déjà.")

class BrandInUseException(BrandDomainException):
    def __init__(self, brand_id: int, products_count: int):
        self.brand_id = brand_id
        super().__init__(f"Impossible de supprimer une marque utilisée par {products_count} produit(s).")
