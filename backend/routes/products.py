# backend/routes/products.py
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from sqlalchemy.orm import Session

from database import get_db
from models.brand import Brand
from models.category import Category
from models.product import Product
from services import inventory
from services.errors import BrandNotFound, CategoryNotFound, DomainError, ProductNotFound, ValidationFailed
from utils.audit import write_log, client_ip
import schemas.product as product_schemas

router = APIRouter(prefix="/api/products", tags=["Products"])


# ---- HELPERS ----
def _get_product_or_404(db: Session, product_id: int) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise ProductNotFound(product_id)
    return product


def _check_references(db: Session, category_id: int, brand_id: int):
    """Category and brand must exist and the brand must belong to the category."""
    if not db.query(Category.id).filter(Category.id == category_id).first():
        raise CategoryNotFound(category_id)
    brand = db.query(Brand).filter(Brand.id == brand_id).first()
    if not brand:
        raise BrandNotFound(brand_id)
    if brand.category_id != category_id:
        raise ValidationFailed(f"Brand {brand_id} does not belong to category {category_id}")


# =========================
# LISTING
# =========================
@router.get("", response_model=List[product_schemas.ProductOut])
def list_products(
    category_id: Optional[int] = Query(None),
    brand_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    query = db.query(Product)
    if category_id is not None:
        query = query.filter(Product.category_id == category_id)
    if brand_id is not None:
        query = query.filter(Product.brand_id == brand_id)
    return query.order_by(Product.id.asc()).all()


@router.get("/{product_id}", response_model=product_schemas.ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return _get_product_or_404(db, product_id)


# =========================
# CREATE / REPLACE
# =========================
@router.post("", response_model=product_schemas.ProductOut, status_code=status.HTTP_201_CREATED)
def add_product(payload: product_schemas.ProductIn, request: Request, db: Session = Depends(get_db)):
    _check_references(db, payload.category_id, payload.brand_id)

    new_product = Product(**payload.model_dump())
    db.add(new_product)
    db.commit()
    db.refresh(new_product)

    write_log(db, action="PRODUCT_CREATE", resource="products", ip=client_ip(request), meta={"id": new_product.id})
    return new_product


# Full replacement; price changes never touch existing order items
@router.put("/{product_id}", response_model=product_schemas.ProductOut)
def update_product(product_id: int, payload: product_schemas.ProductIn, request: Request, db: Session = Depends(get_db)):
    product = _get_product_or_404(db, product_id)
    _check_references(db, payload.category_id, payload.brand_id)

    for key, value in payload.model_dump().items():
        setattr(product, key, value)
    db.commit()
    db.refresh(product)

    write_log(db, action="PRODUCT_UPDATE", resource="products", ip=client_ip(request), meta={"id": product.id})
    return product


# =========================
# STOCK ADJUSTMENT
# =========================
@router.patch("/{product_id}/stock", response_model=product_schemas.StockAdjustResult)
def adjust_stock(product_id: int, payload: product_schemas.StockAdjust, request: Request, db: Session = Depends(get_db)):
    try:
        new_quantity = inventory.adjust_stock(db, product_id, payload.quantity)
    except DomainError as e:
        write_log(db, action="STOCK_ADJUSTMENT", resource="products", status="FAIL", ip=client_ip(request),
                  meta={"id": product_id, "delta": payload.quantity, "reason": e.message})
        raise HTTPException(status_code=e.status_code, detail=e.message)

    write_log(db, action="STOCK_ADJUSTMENT", resource="products", ip=client_ip(request),
              meta={"id": product_id, "delta": payload.quantity, "new": new_quantity})
    return {"new_stock_quantity": new_quantity}


# =========================
# DELETE
# =========================
@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(product_id: int, request: Request, db: Session = Depends(get_db)):
    product = _get_product_or_404(db, product_id)
    db.delete(product)
    db.commit()

    write_log(db, action="PRODUCT_DELETE", resource="products", ip=client_ip(request), meta={"id": product_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
