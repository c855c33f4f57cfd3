from typing import List

from sqlmodel import SQLModel

from src.orders.models import OrderSummary

class DashboardStats(SQLModel):
    total_products: int = 0
    total_orders: int = 0
    pending_orders: int = 0
    total_customers: int = 0
    recent_orders: List[OrderSummary] = []
