"""Exceptions spécifiques au domaine Address."""

class AddressDomainException(Exception):
    """Classe de base pour les exceptions du domaine Address."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

class AddressNotFoundException(AddressDomainException):
    """Adresse inexistante ou appartenant à un autre utilisateur."""
    def __init__(self, address_id: int):
        super().__init__(f"Adresse avec ID {address_id} non trouvée.")
        self.address_id = address_id
