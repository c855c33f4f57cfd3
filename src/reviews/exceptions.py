"""Exceptions du module reviews."""

class ReviewDomainException(Exception):
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

class ReviewNotFoundException(ReviewDomainException):
    def __init__(self, message: str = "Review not found"):
        super().__init__(message)

class ReviewNotAllowedException(ReviewDomainException):
    """Le client n'a pas le droit d'évaluer ce produit ou cette commande."""
    pass

class InvalidReviewException(ReviewDomainException):
    pass

class ReviewOrderNotFoundException(ReviewDomainException):
    def __init__(self):
        super().__init__("Order not found")

class ReviewProductNotFoundException(ReviewDomainException):
    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__("Product not found")
