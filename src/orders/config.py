"""
Configuration spécifique au module Orders.
Contient les libellés de statut et les regroupements utilisés par les règles de workflow.
"""
from typing import Dict

from src.orders.models import OrderStatus

# Libellés affichés au client et dans le back-office
ORDER_STATUS_DISPLAY: Dict[OrderStatus, str] = {
    OrderStatus.PENDING: "Awaiting Review",
    OrderStatus.ADMIN_PENDING: "Awaiting Admin Pricing",
    OrderStatus.CUSTOMER_PENDING: "Awaiting Customer Approval",
    OrderStatus.ACCEPTED: "Accepted",
    OrderStatus.REJECTED: "Rejected",
    OrderStatus.COMPLETED: "Completed",
    OrderStatus.CANCELLED: "Cancelled",
}

# Statuts dans lesquels l'admin peut modifier les lignes et le code promo
EDITABLE_ORDER_STATUSES = (OrderStatus.PENDING, OrderStatus.ADMIN_PENDING)

# Statuts où le total reste provisoire tant que des prix sont masqués
PROVISIONAL_TOTAL_STATUSES = (OrderStatus.PENDING, OrderStatus.ADMIN_PENDING, OrderStatus.CUSTOMER_PENDING)

# Statuts comptés comme "en attente" sur le tableau de bord
DASHBOARD_PENDING_STATUSES = (OrderStatus.PENDING, OrderStatus.ADMIN_PENDING)
