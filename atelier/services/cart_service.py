from typing import Any, Dict, Mapping, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from atelier.data.models.cart import CartModel
from atelier.data.models.cart_item import CartItemModel
from atelier.domain.configuration import canonical_configuration, configuration_key
from atelier.domain.errors import (
    BadRequestError,
    ConcurrencyConflictError,
    InvalidStateError,
    NotFoundError,
)
from atelier.domain.pricing import ZERO, describe_configuration, money, resolve_price
from atelier.repos.cart_repo import CartRepo
from atelier.repos.product_repo import ProductRepo
from atelier.utils.logging import get_logger
from atelier.utils.retry import conflict_retry

logger = get_logger(__name__)


class CartService:
    """
    Cart use cases.
    query (get) only reads, commands (add, update, remove, clear) mutate
    and every command returns the full cart projection.
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)

    # =====================================================
    # QUERY
    # =====================================================
    def get_cart(self, user_id: str) -> Dict[str, Any]:
        cart = self.get_or_create(user_id)
        return self.to_projection(cart)

    # =====================================================
    # COMMANDS
    # =====================================================
    def get_or_create(self, user_id: str) -> CartModel:
        cart = self.repo.get_cart_by_user(user_id)
        if cart:
            return cart

        try:
            self.repo.create_cart(CartModel(user_id=user_id))
            self.repo.commit()
            logger.info(f"Created cart for user {user_id}")
        except IntegrityError:
            # another request created it first, carts.user_id is unique
            self.repo.rollback()
            logger.info(f"Cart for user {user_id} created concurrently, reusing it")

        cart = self.repo.get_cart_by_user(user_id)
        if cart is None:
            raise NotFoundError(f"User {user_id} not found")
        return cart

    @conflict_retry()
    def add_item(
        self,
        user_id: str,
        product_id: str,
        configuration: Optional[Mapping[str, Any]] = None,
        quantity: int = 1,
    ) -> Dict[str, Any]:
        if quantity < 1:
            raise BadRequestError("Quantity must be at least 1")

        product = self.products.get_product(product_id)
        if not product:
            raise NotFoundError(f"Product {product_id} not found")
        if not product.is_active:
            raise InvalidStateError(f"Product {product_id} is not available")

        cart = self.get_or_create(user_id)

        config = canonical_configuration(configuration)
        key = configuration_key(config)
        unit_price = resolve_price(product, config)

        try:
            existing_item = self.repo.find_line(cart.id, product.id, key)

            if existing_item:
                logger.info(
                    f"Product {product_id} already in cart {cart.id}, quantity "
                    f"{existing_item.quantity} -> {existing_item.quantity + quantity}"
                )
                existing_item.quantity += quantity
                existing_item.unit_price = unit_price
            else:
                logger.info(f"Adding product {product_id} to cart {cart.id}")
                self.repo.add_cart_item(
                    cart,
                    CartItemModel(
                        product_id=product.id,
                        configuration=config,
                        configuration_key=key,
                        quantity=quantity,
                        unit_price=unit_price,
                    ),
                )

            self.repo.commit()
        except IntegrityError as e:
            # same line inserted by a concurrent request, retry merges into it
            self.repo.rollback()
            raise ConcurrencyConflictError("Cart line changed concurrently") from e

        return self.get_cart(user_id)

    def update_item(self, user_id: str, item_id: str, quantity: int) -> Dict[str, Any]:
        if quantity < 0:
            raise BadRequestError("Quantity cannot be negative")

        cart = self.get_or_create(user_id)
        item = self.repo.get_cart_item(cart.id, item_id)
        if not item:
            raise NotFoundError(f"Cart item {item_id} not found")

        if quantity == 0:
            logger.info(f"Quantity 0 for item {item_id}, removing it from cart {cart.id}")
            self.repo.delete_cart_item(cart, item)
        else:
            item.quantity = quantity
            # catalog prices may have moved since the line was added
            if item.product is not None:
                item.unit_price = resolve_price(item.product, item.configuration)

        self.repo.commit()
        return self.get_cart(user_id)

    def remove_item(self, user_id: str, item_id: str) -> Dict[str, Any]:
        cart = self.get_or_create(user_id)
        item = self.repo.get_cart_item(cart.id, item_id)
        if not item:
            raise NotFoundError(f"Cart item {item_id} not found")

        logger.info(f"Removing item {item_id} from cart {cart.id}")
        self.repo.delete_cart_item(cart, item)
        self.repo.commit()
        return self.get_cart(user_id)

    def clear(self, user_id: str, commit: bool = True) -> Dict[str, Any]:
        """
        Drop every line. Checkout calls this with commit=False so the
        clear lands in the same transaction as the new order.
        """
        cart = self.get_or_create(user_id)
        removed = self.repo.clear_cart(cart)
        logger.info(f"Cleared {removed} item(s) from cart {cart.id}")

        if not commit:
            return self.to_projection(cart)

        self.repo.commit()
        return self.get_cart(user_id)

    # =====================================================
    # PROJECTION
    # =====================================================
    @staticmethod
    def to_projection(cart: CartModel) -> Dict[str, Any]:
        items = []
        for item in cart.items:
            product = item.product
            unit_price = money(item.unit_price)
            items.append(
                {
                    "id": item.id,
                    "product_id": item.product_id,
                    "product_name": product.name,
                    "product_sku": product.sku,
                    "product_image": product.primary_image_url,
                    "configuration": describe_configuration(product, item.configuration),
                    "quantity": item.quantity,
                    "unit_price": unit_price,
                    "total_price": money(unit_price * item.quantity),
                }
            )

        subtotal = sum((i["total_price"] for i in items), ZERO)
        item_count = sum(i["quantity"] for i in items)

        return {
            "id": cart.id,
            "items": items,
            "subtotal": money(subtotal),
            "item_count": item_count,
        }
