#import every model so SQLAlchemy registers it on Base.metadata

from atelier.data.models.user import UserModel
from atelier.data.models.address import AddressModel
from atelier.data.models.product import (
    ProductModel,
    ProductImageModel,
    MaterialOptionModel,
    ColorOptionModel,
    ProductSizeModel,
    FabricCategoryModel,
    FabricModel,
)
from atelier.data.models.cart import CartModel
from atelier.data.models.cart_item import CartItemModel
from atelier.data.models.order import OrderModel, OrderItemModel, OrderSequenceModel
from atelier.data.models.payment import PaymentModel

__all__ = [
    "UserModel",
    "AddressModel",
    "ProductModel",
    "ProductImageModel",
    "MaterialOptionModel",
    "ColorOptionModel",
    "ProductSizeModel",
    "FabricCategoryModel",
    "FabricModel",
    "CartModel",
    "CartItemModel",
    "OrderModel",
    "OrderItemModel",
    "OrderSequenceModel",
    "PaymentModel",
]
