# atelier/services/product_service.py
import math
import re
import time
from decimal import Decimal
from typing import Any, Dict, Iterable, Mapping, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from atelier.data.models.product import (
    ColorOptionModel,
    FabricCategoryModel,
    FabricModel,
    MaterialOptionModel,
    ProductImageModel,
    ProductModel,
    ProductSizeModel,
)
from atelier.domain.actor import Actor
from atelier.domain.enums import FurnitureCategory
from atelier.domain.errors import BadRequestError, ConflictError, InvalidStateError, NotFoundError
from atelier.repos.product_repo import SORT_ORDERS, ProductRepo
from atelier.utils.logging import get_logger

logger = get_logger(__name__)

MAX_PAGE_SIZE = 100

PRODUCT_FIELDS = (
    "sku",
    "name",
    "description",
    "story",
    "category",
    "base_price",
    "width",
    "height",
    "depth",
    "weight",
    "model_url",
    "model_thumbnail",
    "model_format",
    "lead_time_days",
    "return_days",
    "warranty_years",
    "is_active",
    "is_featured",
)

MATERIAL_FIELDS = ("name", "type", "price_modifier", "texture_url", "is_default")
COLOR_FIELDS = ("name", "hex_code", "price_modifier", "texture_url", "is_default")
SIZE_FIELDS = (
    "label", "sku", "price", "original_price", "width", "height", "depth",
    "in_stock", "sort_order", "is_default",
)
FABRIC_FIELDS = ("name", "hex_color", "texture_url", "price", "in_stock", "sort_order", "is_default")
IMAGE_FIELDS = ("url", "alt_text", "sort_order", "is_primary")


def generate_slug(name: str) -> str:
    """'Oak Dining Table (6 seats)' -> 'oak-dining-table-6-seats'"""
    slug = name.lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[\s_-]+", "-", slug)
    return slug.strip("-")


def _pick(data: Mapping[str, Any], fields: Iterable[str]) -> Dict[str, Any]:
    return {f: data[f] for f in fields if f in data and data[f] is not None}


def _single_default(options: list) -> list:
    """Keep the first option flagged as default, unflag the rest."""
    seen = False
    for option in options:
        if option.get("is_default"):
            if seen:
                option["is_default"] = False
            seen = True
    return options


class ProductService:
    """Catalog administration and browsing."""

    def __init__(self, db: Session):
        self.repo = ProductRepo(db)

    # =====================================================
    # QUERY
    # =====================================================
    def get_product(self, id_or_slug: str) -> Dict[str, Any]:
        product = self.repo.get_by_id_or_slug(id_or_slug)
        if not product:
            raise NotFoundError(f"Product {id_or_slug} not found")
        return self.to_projection(product)

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
    ) -> Dict[str, Any]:
        if sort not in SORT_ORDERS:
            raise BadRequestError(f"Unknown sort '{sort}', expected one of {', '.join(SORT_ORDERS)}")
        if page < 1:
            raise BadRequestError("page must be >= 1")
        if limit < 1 or limit > MAX_PAGE_SIZE:
            raise BadRequestError(f"limit must be between 1 and {MAX_PAGE_SIZE}")
        if min_price is not None and max_price is not None and min_price > max_price:
            raise BadRequestError("min_price cannot exceed max_price")

        total, products = self.repo.list_products(
            category=category,
            featured=featured,
            search=search,
            min_price=min_price,
            max_price=max_price,
            sort=sort,
            page=page,
            limit=limit,
        )
        return {
            "products": [self.to_projection(p) for p in products],
            "total": total,
            "page": page,
            "limit": limit,
            "total_pages": math.ceil(total / limit),
        }

    # =====================================================
    # COMMANDS
    # =====================================================
    def create_product(self, actor: Actor, data: Mapping[str, Any]) -> Dict[str, Any]:
        actor.require_admin()

        if self.repo.get_by_sku(data["sku"]):
            raise ConflictError(f"Product with SKU {data['sku']} already exists")

        slug = generate_slug(data["name"])
        if not slug:
            raise BadRequestError("Product name must contain letters or digits")
        if self.repo.get_by_slug(slug):
            raise ConflictError(f"Product with slug {slug} already exists")

        product = ProductModel(slug=slug, **_pick(data, PRODUCT_FIELDS))
        for option in _single_default([_pick(o, MATERIAL_FIELDS) for o in data.get("material_options") or []]):
            product.material_options.append(MaterialOptionModel(**option))
        for option in _single_default([_pick(o, COLOR_FIELDS) for o in data.get("color_options") or []]):
            product.color_options.append(ColorOptionModel(**option))

        try:
            self.repo.add(product)
            self.repo.commit()
        except IntegrityError as e:
            self.repo.rollback()
            raise ConflictError("Product with the same SKU or slug already exists") from e

        logger.info(f"Created product {product.sku} ({product.slug})")
        return self.get_product(product.id)

    def update_product(self, actor: Actor, product_id: str, changes: Mapping[str, Any]) -> Dict[str, Any]:
        actor.require_admin()
        product = self._load(product_id)

        sku = changes.get("sku")
        if sku and sku != product.sku:
            other = self.repo.get_by_sku(sku)
            if other and other.id != product.id:
                raise ConflictError(f"Product with SKU {sku} already exists")

        name = changes.get("name")
        if name and name != product.name:
            slug = generate_slug(name)
            if not slug:
                raise BadRequestError("Product name must contain letters or digits")
            if self.repo.get_by_slug(slug, exclude_id=product.id):
                slug = f"{slug}-{int(time.time() * 1000)}"
            product.slug = slug

        for field, value in _pick(changes, PRODUCT_FIELDS).items():
            setattr(product, field, value)

        try:
            self.repo.commit()
        except IntegrityError as e:
            self.repo.rollback()
            raise ConflictError("Product with the same SKU or slug already exists") from e

        logger.info(f"Updated product {product_id}")
        return self.get_product(product_id)

    def delete_product(self, actor: Actor, product_id: str) -> None:
        actor.require_admin()
        product = self._load(product_id)

        # order lines keep their product reference for good
        ordered = self.repo.count_order_items(product.id)
        if ordered:
            raise InvalidStateError(
                f"Product {product.sku} appears in {ordered} order item(s), deactivate it instead"
            )

        self.repo.delete(product)
        self.repo.commit()
        logger.info(f"Deleted product {product.sku}")

    # option groups

    def add_material_option(self, actor: Actor, product_id: str, data: Mapping[str, Any]) -> Dict[str, Any]:
        actor.require_admin()
        product = self._load(product_id)

        if data.get("is_default"):
            self.repo.clear_default(MaterialOptionModel, product.id)
        product.material_options.append(MaterialOptionModel(**_pick(data, MATERIAL_FIELDS)))

        return self._save(product, "material option")

    def add_color_option(self, actor: Actor, product_id: str, data: Mapping[str, Any]) -> Dict[str, Any]:
        actor.require_admin()
        product = self._load(product_id)

        if data.get("is_default"):
            self.repo.clear_default(ColorOptionModel, product.id)
        product.color_options.append(ColorOptionModel(**_pick(data, COLOR_FIELDS)))

        return self._save(product, "color option")

    def add_size(self, actor: Actor, product_id: str, data: Mapping[str, Any]) -> Dict[str, Any]:
        actor.require_admin()
        product = self._load(product_id)

        if data.get("is_default"):
            self.repo.clear_default(ProductSizeModel, product.id)
        product.sizes.append(ProductSizeModel(**_pick(data, SIZE_FIELDS)))

        return self._save(product, "size")

    def add_fabric_category(self, actor: Actor, product_id: str, data: Mapping[str, Any]) -> Dict[str, Any]:
        actor.require_admin()
        product = self._load(product_id)

        product.fabric_categories.append(
            FabricCategoryModel(name=data["name"], sort_order=data.get("sort_order") or 0)
        )
        return self._save(product, "fabric category")

    def add_fabric(self, actor: Actor, product_id: str, data: Mapping[str, Any]) -> Dict[str, Any]:
        actor.require_admin()
        product = self._load(product_id)

        category = self.repo.get_fabric_category(product.id, data["fabric_category_id"])
        if not category:
            raise NotFoundError(f"Fabric category {data['fabric_category_id']} not found")

        if data.get("is_default"):
            self.repo.clear_default(FabricModel, product.id)
        product.fabrics.append(FabricModel(fabric_category_id=category.id, **_pick(data, FABRIC_FIELDS)))

        return self._save(product, "fabric")

    # images, metadata only; files live in external storage

    def add_image(self, actor: Actor, product_id: str, data: Mapping[str, Any]) -> Dict[str, Any]:
        actor.require_admin()
        product = self._load(product_id)

        if data.get("is_primary"):
            self.repo.clear_primary_image(product.id)
        product.images.append(ProductImageModel(**_pick(data, IMAGE_FIELDS)))

        return self._save(product, "image")

    def remove_image(self, actor: Actor, product_id: str, image_id: str) -> Dict[str, Any]:
        actor.require_admin()
        product = self._load(product_id)

        image = self.repo.get_image(product.id, image_id)
        if not image:
            raise NotFoundError(f"Image {image_id} not found")

        product.images.remove(image)
        self.repo.commit()
        logger.info(f"Removed image {image_id} from product {product.sku}")
        return self.get_product(product.id)

    # =====================================================
    # HELPERS
    # =====================================================
    def _load(self, product_id: str) -> ProductModel:
        product = self.repo.get_product(product_id)
        if not product:
            raise NotFoundError(f"Product {product_id} not found")
        return product

    def _save(self, product: ProductModel, what: str) -> Dict[str, Any]:
        self.repo.commit()
        logger.info(f"Added {what} to product {product.sku}")
        return self.get_product(product.id)

    @staticmethod
    def to_projection(product: ProductModel) -> Dict[str, Any]:
        data = {field: getattr(product, field) for field in PRODUCT_FIELDS}
        data.update(
            id=product.id,
            slug=product.slug,
            created_at=product.created_at,
            updated_at=product.updated_at,
            images=[
                {
                    "id": i.id,
                    "url": i.url,
                    "alt_text": i.alt_text,
                    "sort_order": i.sort_order,
                    "is_primary": i.is_primary,
                }
                for i in product.images
            ],
            material_options=[
                {"id": m.id, "is_available": m.is_available, **{f: getattr(m, f) for f in MATERIAL_FIELDS}}
                for m in product.material_options
            ],
            color_options=[
                {"id": c.id, "is_available": c.is_available, **{f: getattr(c, f) for f in COLOR_FIELDS}}
                for c in product.color_options
            ],
            sizes=[{"id": s.id, **{f: getattr(s, f) for f in SIZE_FIELDS}} for s in product.sizes],
            fabric_categories=[
                {
                    "id": c.id,
                    "name": c.name,
                    "sort_order": c.sort_order,
                    "fabrics": [
                        {
                            "id": f.id,
                            "fabric_category_id": f.fabric_category_id,
                            **{k: getattr(f, k) for k in FABRIC_FIELDS},
                        }
                        for f in product.fabrics
                        if f.fabric_category_id == c.id
                    ],
                }
                for c in product.fabric_categories
            ],
        )
        return data
