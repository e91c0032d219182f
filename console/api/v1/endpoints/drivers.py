"""Driver registry endpoints."""

from fastapi import APIRouter, Depends, status

from console.api.deps import get_drivers
from console.models.driver import Driver
from console.schemas.driver import DriverCreate, DriverRead, DriverStatusUpdate, DriverUpdate
from console.services.driver_registry import DriverRegistry

router: APIRouter = APIRouter()


@router.get("", response_model=list[DriverRead])
def list_drivers(drivers: DriverRegistry = Depends(get_drivers)) -> list[Driver]:
    return drivers.list()


@router.get("/assignable", response_model=list[DriverRead])
def list_assignable_drivers(drivers: DriverRegistry = Depends(get_drivers)) -> list[Driver]:
    """Drivers offered in the assignment picker; offline drivers are left out."""
    return drivers.assignable()


@router.post("", response_model=DriverRead, status_code=status.HTTP_201_CREATED)
def create_driver(payload: DriverCreate, drivers: DriverRegistry = Depends(get_drivers)) -> Driver:
    return drivers.create(payload.name, payload.phone)


@router.patch("/{driver_id}", response_model=DriverRead)
def update_driver(driver_id: int, payload: DriverUpdate, drivers: DriverRegistry = Depends(get_drivers)) -> Driver:
    return drivers.update(driver_id, payload.model_dump(exclude_none=True))


@router.put("/{driver_id}/status", response_model=DriverRead)
def set_driver_status(
    driver_id: int,
    payload: DriverStatusUpdate,
    drivers: DriverRegistry = Depends(get_drivers),
) -> Driver:
    return drivers.set_status(driver_id, payload.status)


@router.delete("/{driver_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_driver(driver_id: int, drivers: DriverRegistry = Depends(get_drivers)) -> None:
    drivers.remove(driver_id)
