"""
Client-side join of reservations with the product and business catalogs.

The reservation endpoints return bare foreign keys; display data is attached
here by matching `product_id` against the product catalog and, when a
business catalog is supplied, `product.business_id` against it. Missing keys
leave the corresponding field as None and are never an error.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Protocol, TypeVar

from reservation_client.models import Business, Product, ProductSummary, Reservation

logger = logging.getLogger(__name__)


class _HasId(Protocol):
    id: int


T = TypeVar("T", bound=_HasId)


def index_by_id(items: Iterable[T]) -> Dict[int, T]:
    """Map items by id; on duplicate ids the first occurrence wins."""
    index: Dict[int, T] = {}
    for item in items:
        if item.id in index:
            logger.debug("Duplicate catalog id %s ignored", item.id)
            continue
        index[item.id] = item
    return index


def summarize_product(
    product: Product,
    businesses: Optional[Dict[int, Business]] = None,
) -> ProductSummary:
    if businesses is None:
        business = product.business
    else:
        business = businesses.get(product.business_id) if product.business_id is not None else None
    return ProductSummary.from_product(product, business)


def join_reservations(
    reservations: Iterable[Reservation],
    products: Iterable[Product],
    businesses: Optional[Iterable[Business]] = None,
) -> List[Reservation]:
    """
    Attach product (and business) summaries to each reservation.

    Args:
        reservations: Reservations as returned by the API
        products: Product catalog to match on `product_id`
        businesses: Optional business catalog; when omitted the business
            embedded in the product (if any) is used

    Returns:
        New reservation objects; inputs are not modified
    """
    product_index = index_by_id(products)
    business_index = index_by_id(businesses) if businesses is not None else None

    enriched: List[Reservation] = []
    for reservation in reservations:
        product = product_index.get(reservation.product_id)
        if product is None:
            enriched.append(reservation.with_product(None))
            continue
        enriched.append(reservation.with_product(summarize_product(product, business_index)))
    return enriched
