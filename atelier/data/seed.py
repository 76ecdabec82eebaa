# atelier/data/seed.py
from decimal import Decimal

from sqlalchemy import select

from atelier.data.database import SessionLocal, init_db
from atelier.data.models import (
    AddressModel,
    CartModel,
    ColorOptionModel,
    MaterialOptionModel,
    ProductImageModel,
    ProductModel,
    UserModel,
)
from atelier.domain.enums import FurnitureCategory, UserRole
from atelier.utils.logging import get_logger

logger = get_logger(__name__)

USERS = [
    {"email": "admin@atelier.local", "first_name": "Admin", "last_name": "User", "role": UserRole.ADMIN},
    {
        "email": "customer@atelier.local",
        "first_name": "Test",
        "last_name": "Customer",
        "phone": "+96170123456",
        "role": UserRole.CUSTOMER,
    },
]

PRODUCTS = [
    {
        "sku": "TBL-MIL-001",
        "slug": "milano-dining-table",
        "name": "Milano Dining Table",
        "description": "8-seater dining table, solid wood top on a metal base.",
        "category": FurnitureCategory.TABLES,
        "base_price": Decimal("1600"),
        "width": Decimal("220"),
        "height": Decimal("75"),
        "depth": Decimal("100"),
        "lead_time_days": 28,
        "is_featured": True,
        "image": ("https://images.atelier.local/milano-dining-table.jpg", "Milano Dining Table in oak"),
        "materials": [("Oak", "wood", "0", True), ("Walnut", "wood", "200", False), ("Mahogany", "wood", "350", False)],
        "colors": [("Natural", "#D4A574", "0", True), ("Dark Espresso", "#3C2415", "50", False)],
    },
    {
        "sku": "SOF-MOD-001",
        "slug": "modern-cloud-sofa",
        "name": "Modern Cloud Sofa",
        "description": "3-seater sofa with deep cushions, modular layout.",
        "category": FurnitureCategory.SOFAS,
        "base_price": Decimal("2200"),
        "width": Decimal("280"),
        "height": Decimal("85"),
        "depth": Decimal("110"),
        "lead_time_days": 35,
        "is_featured": True,
        "image": ("https://images.atelier.local/modern-cloud-sofa.jpg", "Modern Cloud Sofa in charcoal"),
        "materials": [("Premium Velvet", "fabric", "0", True), ("Italian Leather", "leather", "800", False)],
        "colors": [("Charcoal Grey", "#36454F", "0", True), ("Forest Green", "#228B22", "100", False)],
    },
]


def seed(db=None) -> bool:
    """Demo users and catalog. Does nothing when products already exist."""
    own_session = db is None
    db = db or SessionLocal()
    try:
        if db.execute(select(ProductModel.id).limit(1)).first():
            logger.info("Catalog not empty, skipping seed")
            return False

        for data in USERS:
            user = UserModel(**data)
            user.cart = CartModel()
            db.add(user)
            if user.role == UserRole.CUSTOMER:
                user.addresses.append(
                    AddressModel(
                        label="Home",
                        full_name=f"{user.first_name} {user.last_name}",
                        phone=user.phone,
                        address_line_1="Clemenceau Street, Building 45",
                        city="Beirut",
                        region="Beirut",
                        is_default=True,
                    )
                )

        for data in PRODUCTS:
            data = dict(data)
            materials = data.pop("materials")
            colors = data.pop("colors")
            url, alt_text = data.pop("image")
            product = ProductModel(**data)
            product.images.append(ProductImageModel(url=url, alt_text=alt_text, is_primary=True))
            for name, kind, modifier, default in materials:
                product.material_options.append(
                    MaterialOptionModel(name=name, type=kind, price_modifier=Decimal(modifier), is_default=default)
                )
            for name, hex_code, modifier, default in colors:
                product.color_options.append(
                    ColorOptionModel(name=name, hex_code=hex_code, price_modifier=Decimal(modifier), is_default=default)
                )
            db.add(product)

        db.commit()
        logger.info(f"Seeded {len(USERS)} users and {len(PRODUCTS)} products")
        return True
    finally:
        if own_session:
            db.close()


if __name__ == "__main__":
    init_db()
    seed()
