#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata

from marketplace.data.models.user import UserModel
from marketplace.data.models.vendor import VendorModel
from marketplace.data.models.product import ProductModel, InventoryModel, PricingModel
from marketplace.data.models.cart import CartModel
from marketplace.data.models.cart_item import CartItemModel
from marketplace.data.models.checkout import CheckoutModel
from marketplace.data.models.order import OrderModel, OrderItemModel, ReservationModel
from marketplace.data.models.invoice import InvoiceModel, PaymentModel
from marketplace.data.models.coupon import CouponModel
from marketplace.data.models.address import AddressModel
from marketplace.data.models.review import ReviewModel
from marketplace.data.models.wishlist import WishlistModel, WishlistItemModel

__all__ = [
    "UserModel",
    "VendorModel",
    "ProductModel",
    "InventoryModel",
    "PricingModel",
    "CartModel",
    "CartItemModel",
    "CheckoutModel",
    "OrderModel",
    "OrderItemModel",
    "ReservationModel",
    "InvoiceModel",
    "PaymentModel",
    "CouponModel",
    "AddressModel",
    "ReviewModel",
    "WishlistModel",
    "WishlistItemModel",
]
