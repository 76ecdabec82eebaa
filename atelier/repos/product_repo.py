# atelier/repos/product_repo.py
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import Session, selectinload

from atelier.data.models.order import OrderItemModel
from atelier.data.models.product import (
    FabricCategoryModel,
    ProductImageModel,
    ProductModel,
)
from atelier.domain.enums import FurnitureCategory

_CATALOG = (
    selectinload(ProductModel.images),
    selectinload(ProductModel.material_options),
    selectinload(ProductModel.color_options),
    selectinload(ProductModel.sizes),
    selectinload(ProductModel.fabric_categories),
    selectinload(ProductModel.fabrics),
)

SORT_ORDERS = {
    "price_asc": ProductModel.base_price.asc(),
    "price_desc": ProductModel.base_price.desc(),
    "name_asc": ProductModel.name.asc(),
    "newest": ProductModel.created_at.desc(),
}


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: str) -> ProductModel | None:
        return self.db.execute(
            select(ProductModel)
            .where(ProductModel.id == product_id)
            .options(*_CATALOG)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def get_by_id_or_slug(self, id_or_slug: str) -> ProductModel | None:
        return self.db.execute(
            select(ProductModel)
            .where(or_(ProductModel.id == id_or_slug, ProductModel.slug == id_or_slug))
            .options(*_CATALOG)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def get_by_sku(self, sku: str) -> ProductModel | None:
        return self.db.execute(select(ProductModel).where(ProductModel.sku == sku)).scalar_one_or_none()

    def get_by_slug(self, slug: str, exclude_id: Optional[str] = None) -> ProductModel | None:
        stmt = select(ProductModel).where(ProductModel.slug == slug)
        if exclude_id:
            stmt = stmt.where(ProductModel.id != exclude_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_fabric_category(self, product_id: str, category_id: str) -> FabricCategoryModel | None:
        return self.db.execute(
            select(FabricCategoryModel).where(
                FabricCategoryModel.id == category_id,
                FabricCategoryModel.product_id == product_id,
            )
        ).scalar_one_or_none()

    def list_products(
        self,
        category: Optional[FurnitureCategory] = None,
        featured: Optional[bool] = None,
        search: Optional[str] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        sort: str = "newest",
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[int, List[ProductModel]]:
        filters = [ProductModel.is_active.is_(True)]
        if category is not None:
            filters.append(ProductModel.category == category)
        if featured is not None:
            filters.append(ProductModel.is_featured.is_(featured))
        if search:
            pattern = f"%{search.lower()}%"
            filters.append(
                or_(
                    func.lower(ProductModel.name).like(pattern),
                    func.lower(ProductModel.description).like(pattern),
                )
            )
        if min_price is not None:
            filters.append(ProductModel.base_price >= min_price)
        if max_price is not None:
            filters.append(ProductModel.base_price <= max_price)

        total = self.db.execute(select(func.count(ProductModel.id)).where(*filters)).scalar_one()
        products = self.db.execute(
            select(ProductModel)
            .where(*filters)
            .options(*_CATALOG)
            .order_by(SORT_ORDERS.get(sort, SORT_ORDERS["newest"]))
            .offset((page - 1) * limit)
            .limit(limit)
        ).scalars()
        return total, list(products)

    def count_order_items(self, product_id: str) -> int:
        return self.db.execute(
            select(func.count(OrderItemModel.id)).where(OrderItemModel.product_id == product_id)
        ).scalar_one()

    def clear_default(self, model, product_id: str) -> None:
        """Unset ``is_default`` on every row of one option group of a product."""
        self.db.execute(
            update(model)
            .where(model.product_id == product_id, model.is_default.is_(True))
            .values(is_default=False)
            .execution_options(synchronize_session="fetch")
        )

    def get_image(self, product_id: str, image_id: str) -> ProductImageModel | None:
        return self.db.execute(
            select(ProductImageModel).where(
                ProductImageModel.id == image_id,
                ProductImageModel.product_id == product_id,
            )
        ).scalar_one_or_none()

    def clear_primary_image(self, product_id: str) -> None:
        self.db.execute(
            update(ProductImageModel)
            .where(ProductImageModel.product_id == product_id, ProductImageModel.is_primary.is_(True))
            .values(is_primary=False)
            .execution_options(synchronize_session="fetch")
        )

    def add(self, obj):
        self.db.add(obj)
        self.db.flush()
        return obj

    def delete(self, obj) -> None:
        self.db.delete(obj)
        self.db.flush()

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
