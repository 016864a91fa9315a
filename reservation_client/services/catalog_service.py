from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from reservation_client.config import Config
from reservation_client.graphql_client import GraphQLClient
from reservation_client.models import Business, Product
from reservation_client.queries import (
    GET_ALL_BUSINESSES,
    GET_ALL_PRODUCTS,
    GET_BUSINESSES_BY_USER,
    GET_PRODUCTS_BY_BUSINESS,
)


def _as_list(data: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
    value = data.get(key) if data else None
    return value if isinstance(value, list) else []


class CatalogService:
    """Read-only access to the product and business catalogs used for client-side joins."""

    def __init__(self, client: GraphQLClient, config: type[Config] = Config) -> None:
        self.client = client
        self.config = config
        self.logger = logging.getLogger(__name__)

    def get_all_products(self, limit: Optional[int] = None, offset: int = 0) -> List[Product]:
        data = self.client.execute(
            GET_ALL_PRODUCTS,
            {"limit": limit or self.config.PRODUCT_CATALOG_LIMIT, "offset": offset},
            operation="getAllProducts",
        )
        return [Product.from_dict(item) for item in _as_list(data, "getAllProducts")]

    def get_products_by_business(self, business_id: int) -> List[Product]:
        data = self.client.execute(
            GET_PRODUCTS_BY_BUSINESS,
            {"businessId": business_id},
            operation="getProductsByBusiness",
        )
        return [Product.from_dict(item) for item in _as_list(data, "getProductsByBusiness")]

    def get_all_businesses(self) -> List[Business]:
        data = self.client.execute(GET_ALL_BUSINESSES, operation="getAllBusinesses")
        return [Business.from_dict(item) for item in _as_list(data, "getAllBusinesses")]

    def get_businesses_by_owner(self, user_id: int) -> List[Business]:
        """Businesses owned by the given business-role user."""
        data = self.client.execute(
            GET_BUSINESSES_BY_USER,
            {"userId": user_id},
            operation="getBusinessesByUser",
        )
        businesses = [Business.from_dict(item) for item in _as_list(data, "getBusinessesByUser")]
        self.logger.debug("User %d owns %d businesses", user_id, len(businesses))
        return businesses
