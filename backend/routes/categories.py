# backend/routes/categories.py
from typing import List

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from database import get_db
from models.category import Category
from services.errors import CategoryNotFound
from utils.audit import write_log, client_ip
from schemas.category import CategoryIn, CategoryOut

router = APIRouter(prefix="/api/categories", tags=["Categories"])


def _get_category_or_404(db: Session, category_id: int) -> Category:
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise CategoryNotFound(category_id)
    return category


# Storefront order: `order` ascending, ties by insertion
@router.get("", response_model=List[CategoryOut])
def list_categories(db: Session = Depends(get_db)):
    return db.query(Category).order_by(Category.order.asc(), Category.id.asc()).all()


@router.get("/{category_id}", response_model=CategoryOut)
def get_category(category_id: int, db: Session = Depends(get_db)):
    return _get_category_or_404(db, category_id)


@router.post("", response_model=CategoryOut, status_code=status.HTTP_201_CREATED)
def create_category(payload: CategoryIn, request: Request, db: Session = Depends(get_db)):
    category = Category(**payload.model_dump())
    db.add(category)
    db.commit()
    db.refresh(category)

    write_log(db, action="CATEGORY_CREATE", resource="categories", ip=client_ip(request), meta={"id": category.id})
    return category


@router.put("/{category_id}", response_model=CategoryOut)
def update_category(category_id: int, payload: CategoryIn, request: Request, db: Session = Depends(get_db)):
    category = _get_category_or_404(db, category_id)
    for key, value in payload.model_dump().items():
        setattr(category, key, value)
    db.commit()
    db.refresh(category)

    write_log(db, action="CATEGORY_UPDATE", resource="categories", ip=client_ip(request), meta={"id": category.id})
    return category


# Brands and products of the category go with it (FK cascade)
@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(category_id: int, request: Request, db: Session = Depends(get_db)):
    category = _get_category_or_404(db, category_id)
    db.delete(category)
    db.commit()

    write_log(db, action="CATEGORY_DELETE", resource="categories", ip=client_ip(request), meta={"id": category_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
