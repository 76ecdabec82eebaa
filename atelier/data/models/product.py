from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from atelier.data.database import Base
from atelier.data.models.base import created_at_column, id_column, updated_at_column
from atelier.domain.enums import FurnitureCategory, ModelFormat
from atelier.utils.settings import DEFAULT_LEAD_TIME_DAYS, DEFAULT_RETURN_DAYS, DEFAULT_WARRANTY_YEARS


def _product_fk():
    return Column(String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)


class ProductModel(Base):
    __tablename__ = "products"

    id = id_column()
    sku = Column(String(64), nullable=False, unique=True)
    slug = Column(String(255), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    story = Column(Text, nullable=True)
    category = Column(Enum(FurnitureCategory, name="furniture_category"), nullable=False, index=True)
    base_price = Column(Numeric(10, 2), nullable=False)

    width = Column(Numeric(6, 2), nullable=True)
    height = Column(Numeric(6, 2), nullable=True)
    depth = Column(Numeric(6, 2), nullable=True)
    weight = Column(Numeric(6, 2), nullable=True)

    # 3d model metadata, the asset itself lives in external storage
    model_url = Column(String(500), nullable=True)
    model_thumbnail = Column(String(500), nullable=True)
    model_format = Column(Enum(ModelFormat, name="model_format"), nullable=True)

    lead_time_days = Column(Integer, nullable=False, default=DEFAULT_LEAD_TIME_DAYS)
    return_days = Column(Integer, nullable=False, default=DEFAULT_RETURN_DAYS)
    warranty_years = Column(Integer, nullable=False, default=DEFAULT_WARRANTY_YEARS)
    is_active = Column(Boolean, nullable=False, default=True)
    is_featured = Column(Boolean, nullable=False, default=False)

    created_at = created_at_column()
    updated_at = updated_at_column()

    images = relationship(
        "ProductImageModel", cascade="all, delete-orphan", order_by="ProductImageModel.sort_order"
    )
    material_options = relationship("MaterialOptionModel", cascade="all, delete-orphan")
    color_options = relationship("ColorOptionModel", cascade="all, delete-orphan")
    sizes = relationship("ProductSizeModel", cascade="all, delete-orphan", order_by="ProductSizeModel.sort_order")
    fabric_categories = relationship(
        "FabricCategoryModel", cascade="all, delete-orphan", order_by="FabricCategoryModel.sort_order"
    )
    fabrics = relationship("FabricModel", cascade="all, delete-orphan", order_by="FabricModel.sort_order")

    # cart lines go away with the product; order lines block deletion (RESTRICT on order_items)
    cart_items = relationship("CartItemModel", back_populates="product", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("base_price >= 0", name="ck_products_base_price"),
        CheckConstraint("lead_time_days >= 1", name="ck_products_lead_time"),
    )

    @property
    def primary_image_url(self):
        for image in self.images:
            if image.is_primary:
                return image.url
        return None


class ProductImageModel(Base):
    __tablename__ = "product_images"

    id = id_column()
    product_id = _product_fk()
    url = Column(String(500), nullable=False)
    alt_text = Column(String(255), nullable=True)
    sort_order = Column(Integer, nullable=False, default=0)
    is_primary = Column(Boolean, nullable=False, default=False)
    created_at = created_at_column()


class MaterialOptionModel(Base):
    __tablename__ = "material_options"

    id = id_column()
    product_id = _product_fk()
    name = Column(String(100), nullable=False)
    type = Column(String(100), nullable=False)
    price_modifier = Column(Numeric(10, 2), nullable=False, default=0)
    texture_url = Column(String(500), nullable=True)
    is_default = Column(Boolean, nullable=False, default=False)
    is_available = Column(Boolean, nullable=False, default=True)
    created_at = created_at_column()


class ColorOptionModel(Base):
    __tablename__ = "color_options"

    id = id_column()
    product_id = _product_fk()
    name = Column(String(100), nullable=False)
    hex_code = Column(String(9), nullable=False)
    price_modifier = Column(Numeric(10, 2), nullable=False, default=0)
    texture_url = Column(String(500), nullable=True)
    is_default = Column(Boolean, nullable=False, default=False)
    is_available = Column(Boolean, nullable=False, default=True)
    created_at = created_at_column()


class ProductSizeModel(Base):
    __tablename__ = "product_sizes"

    id = id_column()
    product_id = _product_fk()
    label = Column(String(100), nullable=False)
    sku = Column(String(64), nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    original_price = Column(Numeric(10, 2), nullable=True)
    width = Column(Numeric(6, 2), nullable=False)
    height = Column(Numeric(6, 2), nullable=False)
    depth = Column(Numeric(6, 2), nullable=False)
    in_stock = Column(Boolean, nullable=False, default=True)
    sort_order = Column(Integer, nullable=False, default=0)
    is_default = Column(Boolean, nullable=False, default=False)
    created_at = created_at_column()


class FabricCategoryModel(Base):
    __tablename__ = "fabric_categories"

    id = id_column()
    product_id = _product_fk()
    name = Column(String(100), nullable=False)
    sort_order = Column(Integer, nullable=False, default=0)
    created_at = created_at_column()


class FabricModel(Base):
    __tablename__ = "fabrics"

    id = id_column()
    product_id = _product_fk()
    fabric_category_id = Column(
        String(36), ForeignKey("fabric_categories.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(100), nullable=False)
    hex_color = Column(String(9), nullable=False)
    texture_url = Column(String(500), nullable=True)
    # added on top of the base/size price
    price = Column(Numeric(10, 2), nullable=False, default=0)
    in_stock = Column(Boolean, nullable=False, default=True)
    sort_order = Column(Integer, nullable=False, default=0)
    is_default = Column(Boolean, nullable=False, default=False)
    created_at = created_at_column()

    category = relationship("FabricCategoryModel")
