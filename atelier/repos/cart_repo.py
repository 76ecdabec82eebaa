# atelier/repos/cart_repo.py

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from atelier.data.models.cart import CartModel
from atelier.data.models.cart_item import CartItemModel
from atelier.data.models.product import ProductModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_cart_by_user(self, user_id: str) -> CartModel | None:
        return self.db.execute(
            select(CartModel)
            .where(CartModel.user_id == user_id)
            .options(
                selectinload(CartModel.items)
                .selectinload(CartItemModel.product)
                .options(
                    selectinload(ProductModel.images),
                    selectinload(ProductModel.material_options),
                    selectinload(ProductModel.color_options),
                    selectinload(ProductModel.sizes),
                    selectinload(ProductModel.fabrics),
                )
            )
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def create_cart(self, cart: CartModel) -> CartModel:
        self.db.add(cart)
        self.db.flush()
        return cart

    def get_cart_item(self, cart_id: str, item_id: str) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel).where(
                CartItemModel.id == item_id,
                CartItemModel.cart_id == cart_id,
            )
        ).scalar_one_or_none()

    def find_line(self, cart_id: str, product_id: str, configuration_key: str) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel).where(
                CartItemModel.cart_id == cart_id,
                CartItemModel.product_id == product_id,
                CartItemModel.configuration_key == configuration_key,
            )
        ).scalar_one_or_none()

    def add_cart_item(self, cart: CartModel, item: CartItemModel) -> CartItemModel:
        cart.items.append(item)
        self.db.flush()
        return item

    def delete_cart_item(self, cart: CartModel, item: CartItemModel) -> None:
        cart.items.remove(item)
        self.db.flush()

    def clear_cart(self, cart: CartModel) -> int:
        count = len(cart.items)
        #delete-orphan removes the rows on flush
        cart.items.clear()
        self.db.flush()
        return count

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
