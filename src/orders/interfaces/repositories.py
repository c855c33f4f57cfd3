from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from src.orders.models import Order, OrderStatus, OrderStatusHistory


class AbstractOrderRepository(ABC):
    """Interface abstraite pour le repository des commandes et de leur historique."""

    @abstractmethod
    async def get_by_id(self, order_id: int) -> Optional[Order]:
        """Récupère une commande (lignes et produits chargés)."""
        pass

    @abstractmethod
    async def list_by_user(
        self, user_id: int, limit: int, offset: int, status: Optional[OrderStatus] = None
    ) -> Tuple[List[Order], int]:
        pass

    @abstractmethod
    async def list_all(
        self, limit: int, offset: int, status: Optional[OrderStatus] = None, search: Optional[str] = None
    ) -> Tuple[List[Order], int]:
        pass

    @abstractmethod
    async def next_sequence(self, prefix: str) -> int:
        """Prochain numéro de séquence pour un préfixe de numéro de commande."""
        pass

    @abstractmethod
    async def add_history(
        self,
        order_id: int,
        previous_status: Optional[OrderStatus],
        new_status: OrderStatus,
        note: Optional[str],
        created_by_id: Optional[int],
    ) -> OrderStatusHistory:
        """Ajoute une entrée d'historique (sans commit)."""
        pass

    @abstractmethod
    async def list_history(self, order_id: int) -> List[OrderStatusHistory]:
        pass
