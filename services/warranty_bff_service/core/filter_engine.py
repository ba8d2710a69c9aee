"""Search and filter predicates over codes and batches."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from enum import Enum

from pydantic import BaseModel, ConfigDict

from services.warranty_bff_service.dto.backend_v1 import Batch, Code, Product

ALL = "all"
UNASSIGNED = "unassigned"


class StatusFilter(str, Enum):
    ALL = "all"
    ACTIVATED = "activated"
    PENDING = "pending"


class FilterCriteria(BaseModel):
    """Current search/filter inputs of the admin console."""

    model_config = ConfigDict(frozen=True)

    search: str = ""
    status: StatusFilter = StatusFilter.ALL
    product: str = ALL
    shop: str = ALL

    @property
    def has_active_filters(self) -> bool:
        return bool(self.search) or (
            self.status != StatusFilter.ALL or self.product != ALL or self.shop != ALL
        )

    def cleared(self) -> FilterCriteria:
        return FilterCriteria()


def _matches_code(code: Code, criteria: FilterCriteria, needle: str) -> bool:
    if needle and needle not in code.serial_number.lower():
        return False

    if criteria.status == StatusFilter.ACTIVATED and not code.is_activated:
        return False
    if criteria.status == StatusFilter.PENDING and code.is_activated:
        return False

    if criteria.product != ALL and code.product_id != criteria.product:
        return False

    if criteria.shop == UNASSIGNED:
        return code.assigned_shop_id is None
    if criteria.shop != ALL and code.assigned_shop_id != criteria.shop:
        return False

    return True


def apply(codes: Iterable[Code], criteria: FilterCriteria) -> list[Code]:
    """Return the codes passing every active criterion, in input order."""
    needle = criteria.search.strip().lower()
    return [code for code in codes if _matches_code(code, criteria, needle)]


def apply_to_batches(
    batches: Sequence[Batch],
    products: Mapping[str, Product],
    criteria: FilterCriteria,
) -> list[Batch]:
    """Batch-level filter: search hits product name or batch id; product must match.

    Args:
        batches: Batches in display order
        products: Products keyed by product id
        criteria: Current filter criteria
    """
    needle = criteria.search.strip().lower()
    visible: list[Batch] = []
    for batch in batches:
        if needle:
            product = products.get(batch.product_id)
            product_name = product.product_name.lower() if product else ""
            if needle not in product_name and needle not in batch.batch_id.lower():
                continue
        if criteria.product != ALL and batch.product_id != criteria.product:
            continue
        visible.append(batch)
    return visible
