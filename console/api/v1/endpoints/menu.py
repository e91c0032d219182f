"""Menu catalog endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from console.db.session import get_db
from console.models.menu import MenuItem
from console.schemas.menu import MenuItemCreate, MenuItemRead

router: APIRouter = APIRouter()


@router.get("", response_model=list[MenuItemRead])
def list_menu_items(db: Session = Depends(get_db)) -> list[MenuItem]:
    return list(db.scalars(select(MenuItem).order_by(MenuItem.category, MenuItem.name)).all())


@router.post("", response_model=MenuItemRead, status_code=status.HTTP_201_CREATED)
def create_menu_item(payload: MenuItemCreate, db: Session = Depends(get_db)) -> MenuItem:
    item = MenuItem(**payload.model_dump())
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_menu_item(item_id: int, db: Session = Depends(get_db)) -> None:
    """Remove a dish; past orders keep their snapshot lines."""
    item = db.get(MenuItem, item_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Menu item not found")
    db.delete(item)
    db.commit()
