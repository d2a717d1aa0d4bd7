from __future__ import annotations

from dataclasses import dataclass
import math

from sqlalchemy import func, select
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select


@dataclass(frozen=True)
class PageRequest:
    skip: int = 0
    take: int = 10

    def __post_init__(self) -> None:
        if self.skip < 0:
            raise ValueError("skip must be >= 0")
        if self.take < 1:
            raise ValueError("take must be >= 1")

    @property
    def page(self) -> int:
        return self.skip // self.take + 1


@dataclass
class Page:
    items: list
    total: int
    page: int
    total_pages: int


def paginate(db: Session, query: Select, page: PageRequest) -> Page:
    """Run ``query`` (already filtered and ordered) with skip/take and a total count."""
    total = db.execute(select(func.count()).select_from(query.order_by(None).subquery())).scalar_one()
    items = list(db.execute(query.offset(page.skip).limit(page.take)).scalars())
    return Page(
        items=items,
        total=total,
        page=page.page,
        total_pages=math.ceil(total / page.take) if total else 0,
    )
