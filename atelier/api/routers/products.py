# atelier/api/routers/products.py
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from atelier.api.deps import get_actor
from atelier.api.errors import http_errors
from atelier.data.database import get_db
from atelier.domain.actor import Actor
from atelier.domain.enums import FurnitureCategory
from atelier.domain.schemas import (
    ColorOptionIn,
    FabricCategoryIn,
    FabricIn,
    MaterialOptionIn,
    ProductCreate,
    ProductImageIn,
    ProductListOut,
    ProductOut,
    ProductUpdate,
    SizeIn,
)
from atelier.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["products"])


# public catalog

@router.get("", response_model=ProductListOut)
def list_products(
    category: Optional[FurnitureCategory] = Query(None),
    featured: Optional[bool] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    min_price: Optional[Decimal] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, ge=0),
    sort: str = Query("newest"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    with http_errors():
        return ProductService(db).list_products(
            category=category,
            featured=featured,
            search=search,
            min_price=min_price,
            max_price=max_price,
            sort=sort,
            page=page,
            limit=limit,
        )


@router.get("/{id_or_slug}", response_model=ProductOut)
def get_product(id_or_slug: str, db: Session = Depends(get_db)):
    with http_errors():
        return ProductService(db).get_product(id_or_slug)


# admin

@router.post("", response_model=ProductOut, status_code=201)
def create_product(payload: ProductCreate, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    with http_errors():
        return ProductService(db).create_product(actor, payload.model_dump())


@router.patch("/{product_id}", response_model=ProductOut)
def update_product(
    product_id: str,
    payload: ProductUpdate,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    with http_errors():
        return ProductService(db).update_product(actor, product_id, payload.model_dump(exclude_unset=True))


@router.delete("/{product_id}", status_code=204)
def delete_product(product_id: str, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    with http_errors():
        ProductService(db).delete_product(actor, product_id)
    return Response(status_code=204)


@router.post("/{product_id}/materials", response_model=ProductOut, status_code=201)
def add_material_option(
    product_id: str,
    payload: MaterialOptionIn,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    with http_errors():
        return ProductService(db).add_material_option(actor, product_id, payload.model_dump())


@router.post("/{product_id}/colors", response_model=ProductOut, status_code=201)
def add_color_option(
    product_id: str,
    payload: ColorOptionIn,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    with http_errors():
        return ProductService(db).add_color_option(actor, product_id, payload.model_dump())


@router.post("/{product_id}/sizes", response_model=ProductOut, status_code=201)
def add_size(
    product_id: str,
    payload: SizeIn,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    with http_errors():
        return ProductService(db).add_size(actor, product_id, payload.model_dump())


@router.post("/{product_id}/fabric-categories", response_model=ProductOut, status_code=201)
def add_fabric_category(
    product_id: str,
    payload: FabricCategoryIn,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    with http_errors():
        return ProductService(db).add_fabric_category(actor, product_id, payload.model_dump())


@router.post("/{product_id}/fabrics", response_model=ProductOut, status_code=201)
def add_fabric(
    product_id: str,
    payload: FabricIn,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    with http_errors():
        return ProductService(db).add_fabric(actor, product_id, payload.model_dump())


@router.post("/{product_id}/images", response_model=ProductOut, status_code=201)
def add_image(
    product_id: str,
    payload: ProductImageIn,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    with http_errors():
        return ProductService(db).add_image(actor, product_id, payload.model_dump())


@router.delete("/{product_id}/images/{image_id}", response_model=ProductOut)
def remove_image(
    product_id: str,
    image_id: str,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    with http_errors():
        return ProductService(db).remove_image(actor, product_id, image_id)
