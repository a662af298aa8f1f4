# backend/routes/brands.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.orm import Session

from database import get_db
from models.brand import Brand
from models.category import Category
from services.errors import BrandNotFound, CategoryNotFound
from utils.audit import write_log, client_ip
from schemas.brand import BrandIn, BrandOut

router = APIRouter(prefix="/api/brands", tags=["Brands"])


def _get_brand_or_404(db: Session, brand_id: int) -> Brand:
    brand = db.query(Brand).filter(Brand.id == brand_id).first()
    if not brand:
        raise BrandNotFound(brand_id)
    return brand


def _ensure_category(db: Session, category_id: int):
    if not db.query(Category.id).filter(Category.id == category_id).first():
        raise CategoryNotFound(category_id)


@router.get("", response_model=List[BrandOut])
def list_brands(category_id: Optional[int] = Query(None), db: Session = Depends(get_db)):
    query = db.query(Brand)
    if category_id is not None:
        query = query.filter(Brand.category_id == category_id)
    return query.order_by(Brand.id.asc()).all()


@router.get("/{brand_id}", response_model=BrandOut)
def get_brand(brand_id: int, db: Session = Depends(get_db)):
    return _get_brand_or_404(db, brand_id)


@router.post("", response_model=BrandOut, status_code=status.HTTP_201_CREATED)
def create_brand(payload: BrandIn, request: Request, db: Session = Depends(get_db)):
    _ensure_category(db, payload.category_id)
    brand = Brand(**payload.model_dump())
    db.add(brand)
    db.commit()
    db.refresh(brand)

    write_log(db, action="BRAND_CREATE", resource="brands", ip=client_ip(request), meta={"id": brand.id})
    return brand


@router.put("/{brand_id}", response_model=BrandOut)
def update_brand(brand_id: int, payload: BrandIn, request: Request, db: Session = Depends(get_db)):
    brand = _get_brand_or_404(db, brand_id)
    _ensure_category(db, payload.category_id)
    for key, value in payload.model_dump().items():
        setattr(brand, key, value)
    db.commit()
    db.refresh(brand)

    write_log(db, action="BRAND_UPDATE", resource="brands", ip=client_ip(request), meta={"id": brand.id})
    return brand


@router.delete("/{brand_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_brand(brand_id: int, request: Request, db: Session = Depends(get_db)):
    brand = _get_brand_or_404(db, brand_id)
    db.delete(brand)
    db.commit()

    write_log(db, action="BRAND_DELETE", resource="brands", ip=client_ip(request), meta={"id": brand_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
