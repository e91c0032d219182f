"""Reporting endpoints."""

from datetime import date, datetime

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from console.api.deps import get_store
from console.core.errors import ValidationError
from console.db.session import get_db
from console.models.menu import MenuItem
from console.schemas.analytics import AnalyticsSnapshot, ReportGranularity
from console.services.analytics import aggregate
from console.services.order_store import OrderStore
from console.utils.time import business_tz, default_report_range

router: APIRouter = APIRouter()


@router.get("", response_model=AnalyticsSnapshot)
def get_analytics(
    start: date | None = None,
    end: date | None = None,
    all_time: bool = False,
    granularity: ReportGranularity = "daily",
    store: OrderStore = Depends(get_store),
    db: Session = Depends(get_db),
) -> AnalyticsSnapshot:
    """Metrics for ``[start, end]``; defaults to the last 7 days, ``all_time`` drops the range."""
    tz = business_tz()
    today = datetime.now(tz).date()
    if all_time:
        start = end = None
    elif start is None and end is None:
        start, end = default_report_range(today)
    elif start is None or end is None:
        raise ValidationError("Both start and end are required for a custom range")
    if start is not None and end is not None and start > end:
        raise ValidationError("Range start must not be after range end")

    catalog = db.scalars(select(MenuItem)).all()
    return aggregate(
        store.list_orders(),
        catalog,
        today=today,
        tz=tz,
        start=start,
        end=end,
        granularity=granularity,
    )
