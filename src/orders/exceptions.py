"""Exceptions spécifiques au domaine Order."""

class OrderDomainException(Exception):
    """Classe de base pour les exceptions du domaine Order."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

class OrderNotFoundException(OrderDomainException):
    """Commande inexistante ou appartenant à un autre client."""
    def __init__(self, order_id=None):
        super().__init__("Order not found")
        self.order_id = order_id

class OrderItemNotFoundException(OrderDomainException):
    def __init__(self, item_id: int):
        super().__init__(f"Order item {item_id} not found")
        self.item_id = item_id

class OrderAccessDeniedException(OrderDomainException):
    def __init__(self, message: str = "You do not have permission to modify this order"):
        super().__init__(message)

class InvalidStatusTransitionException(OrderDomainException):
    """Transition de statut refusée par les règles de workflow."""
    pass

class OrderCreationFailedException(OrderDomainException):
    """Passage de commande refusé (panier vide, adresse, stock, prix spéciaux...)."""
    pass

class InvalidOrderOperationException(OrderDomainException):
    """Opération impossible dans l'état actuel de la commande."""
    pass

class InsufficientStockForOrderException(OrderDomainException):
    def __init__(self, product_name: str, available: int, required: int):
        super().__init__(f'Not enough stock for "{product_name}". Available: {available}, Required: {required}')
        self.product_name = product_name
        self.available = available
        self.required = required
