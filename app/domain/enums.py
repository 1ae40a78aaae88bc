# app/domain/enums.py
from enum import Enum


class Category(str, Enum):
    ELECTRONICS = "Electronics"
    CLOTHING = "Clothing"
    BOOKS = "Books"
    HOME_GARDEN = "Home & Garden"
    SPORTS_OUTDOORS = "Sports & Outdoors"
    TOYS_GAMES = "Toys & Games"
    AUTOMOTIVE = "Automotive"
    HEALTH_BEAUTY = "Health & Beauty"
    FURNITURE = "Furniture"
    OTHER = "Other"


class Condition(str, Enum):
    NEW = "New"
    LIKE_NEW = "Like New"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"


class PaymentMethod(str, Enum):
    CASH_ON_DELIVERY = "Cash on Delivery"
    UPI_NET_BANKING = "UPI / Net Banking"
    CARD_PAYMENT = "Card Payment"


class OrderStatus(str, Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"
