"""
Module Orders - Gestion des commandes
"""

from src.orders.models import Order, OrderItem, OrderStatus, OrderStatusHistory, PaymentMethod

__all__ = ["Order", "OrderItem", "OrderStatus", "OrderStatusHistory", "PaymentMethod"]
