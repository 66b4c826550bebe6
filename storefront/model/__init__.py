# ------ storefront/model/__init__.py ------

from .user import User, RefreshToken, Address
from .category import Category
from .product import Product, ProductImage
from .cart import CartItem, WishlistItem
from .coupon import Coupon
from .order import Order, OrderItem, OrderStatusHistory
from .types import GUID

__all__ = [
    "User",
    "RefreshToken",
    "Address",
    "Category",
    "Product",
    "ProductImage",
    "CartItem",
    "WishlistItem",
    "Coupon",
    "Order",
    "OrderItem",
    "OrderStatusHistory",
    "GUID",
]
