"""Database models"""

from app.models.tenant import Restaurant, Table
from app.models.user import User, RestaurantUser
from app.models.menu import Category, Product
from app.models.stock import Stock, StockMovement, WarehouseProduct, WarehouseMovement
from app.models.order import Order, OrderItem, Payment
from app.models.subscription import Subscription, SubscriptionPayment
from app.models.support import SupportTicket, TicketMessage
from app.models.audit import SystemLog
from app.models.cash import CashSession, ManualRevenue, Expense

__all__ = [
    "Restaurant",
    "Table",
    "User",
    "RestaurantUser",
    "Category",
    "Product",
    "Stock",
    "StockMovement",
    "WarehouseProduct",
    "WarehouseMovement",
    "Order",
    "OrderItem",
    "Payment",
    "Subscription",
    "SubscriptionPayment",
    "SupportTicket",
    "TicketMessage",
    "SystemLog",
    "CashSession",
    "ManualRevenue",
    "Expense",
]
