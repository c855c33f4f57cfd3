"""Exceptions du domaine PromoCode."""

class PromoCodeDomainException(Exception):
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

class PromoCodeNotFoundException(PromoCodeDomainException):
    def __init__(self, promo_code_id=None):
        self.promo_code_id = promo_code_id
        super().__init__("Promo code not found")

class DuplicatePromoCodeException(PromoCodeDomainException):
    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Promo code '{code}' already exists")

class PromoCodeInUseException(PromoCodeDomainException):
    def __init__(self):
        super().__init__("Cannot delete a promo code that has been used in orders")

class PromoCodeAssignmentException(PromoCodeDomainException):
    """Attribution ou exclusion d'utilisateur impossible (doublon, introuvable)."""
    pass

class PromoUserNotFoundException(PromoCodeDomainException):
    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__("User not found")

class InvalidPromoCodeException(PromoCodeDomainException):
    """Code refusé par le validateur ; le message est celui du contrôle en échec."""
    pass

class PromoOrderNotFoundException(PromoCodeDomainException):
    def __init__(self, order_id: int):
        self.order_id = order_id
        super().__init__("Order not found")
