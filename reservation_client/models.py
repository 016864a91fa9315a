# reservation_client/models.py
from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class ReservationStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PICKED_UP = "PICKED_UP"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    def to_backend(self) -> str:
        """The API expects lowercase status filters."""
        return self.value.lower()


TERMINAL_STATUSES = frozenset(
    {ReservationStatus.PICKED_UP, ReservationStatus.CANCELLED, ReservationStatus.EXPIRED}
)

_SEPARATORS = re.compile(r"[-\s]+")
_STATUS_ALIASES = {
    "CANCELED": "CANCELLED",
    "PICKEDUP": "PICKED_UP",
}


def normalize_status(status: ReservationStatus | str | None) -> str:
    """Normalize wire values such as "Picked Up" or "canceled" to the enum keys."""
    if isinstance(status, ReservationStatus):
        return status.value
    raw = _SEPARATORS.sub("_", str(status or "").strip().upper())
    return _STATUS_ALIASES.get(raw, raw)


def parse_status(status: ReservationStatus | str | None) -> Optional[ReservationStatus]:
    try:
        return ReservationStatus(normalize_status(status))
    except ValueError:
        return None


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse ISO-8601 strings or epoch milliseconds into aware UTC datetimes."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)) or (isinstance(value, str) and value.isdigit()):
        parsed = datetime.fromtimestamp(float(value) / 1000.0, tz=timezone.utc)
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _optional_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)


def _optional_int(value: Any) -> Optional[int]:
    return None if value is None or value == "" else int(value)


@dataclass
class Business:
    """Business entry from the catalog (getAllBusinesses / getBusinessesByUser)."""

    id: int
    name: str
    address: str = ""
    phone: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    description: Optional[str] = None
    food_type: Optional[str] = None
    is_active: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Business":
        return cls(
            id=int(data["id"]),
            name=data.get("name") or "",
            address=data.get("address") or "",
            phone=data.get("phone"),
            latitude=_optional_float(data.get("latitude")),
            longitude=_optional_float(data.get("longitude")),
            description=data.get("description"),
            food_type=data.get("foodType"),
            is_active=bool(data.get("isActive", True)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "phone": self.phone,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "description": self.description,
            "foodType": self.food_type,
            "isActive": self.is_active,
        }


@dataclass
class Product:
    """Product entry from the catalog; `business` is only present when the API embeds it."""

    id: int
    business_id: Optional[int]
    name: str
    description: str = ""
    price: float = 0.0
    discounted_price: Optional[float] = None
    image_url: Optional[str] = None
    stock: Optional[int] = None
    status: Optional[str] = None
    business: Optional[Business] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Product":
        embedded = data.get("business")
        return cls(
            id=int(data["id"]),
            business_id=_optional_int(data.get("businessId")),
            name=data.get("name") or "",
            description=data.get("description") or "",
            price=float(data.get("price") or 0),
            discounted_price=_optional_float(data.get("discountedPrice")),
            image_url=data.get("imageUrl"),
            stock=_optional_int(data.get("stock")),
            status=data.get("status"),
            business=Business.from_dict(embedded) if embedded else None,
        )


@dataclass(frozen=True)
class BusinessSummary:
    id: int
    name: str
    address: str = ""
    phone: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @classmethod
    def from_business(cls, business: Business) -> "BusinessSummary":
        return cls(
            id=business.id,
            name=business.name,
            address=business.address or "",
            phone=business.phone,
            latitude=business.latitude,
            longitude=business.longitude,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "phone": self.phone,
            "latitude": self.latitude,
            "longitude": self.longitude,
        }


@dataclass(frozen=True)
class ProductSummary:
    """Display data attached to a reservation on the client side."""

    id: int
    name: str
    description: str = ""
    price: float = 0.0
    discounted_price: Optional[float] = None
    image_url: Optional[str] = None
    business: Optional[BusinessSummary] = None

    @classmethod
    def from_product(cls, product: Product, business: Optional[Business] = None) -> "ProductSummary":
        return cls(
            id=product.id,
            name=product.name,
            description=product.description,
            price=product.price,
            discounted_price=product.discounted_price,
            image_url=product.image_url,
            business=BusinessSummary.from_business(business) if business else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "discountedPrice": self.discounted_price,
            "imageUrl": self.image_url,
            "business": self.business.to_dict() if self.business else None,
        }


@dataclass
class Reservation:
    """A consumer's claim on a quantity of a business's product."""

    id: int
    product_id: int
    user_id: int
    quantity: int
    status: str
    created_at: Optional[datetime]
    business_id: Optional[int] = None
    updated_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    picked_up_at: Optional[datetime] = None
    product: Optional[ProductSummary] = None

    def __post_init__(self) -> None:
        self.status = normalize_status(self.status)

    @property
    def status_enum(self) -> Optional[ReservationStatus]:
        return parse_status(self.status)

    @property
    def is_terminal(self) -> bool:
        status = self.status_enum
        return status is not None and status.is_terminal

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Reservation":
        """Build from the API payload. The API reports the business as `outletId`."""
        business_id = data.get("businessId", data.get("outletId"))
        return cls(
            id=int(data["id"]),
            product_id=int(data["productId"]),
            user_id=int(data.get("userId") or 0),
            quantity=int(data.get("quantity") or 0),
            status=data.get("status") or "",
            created_at=parse_timestamp(data.get("createdAt")),
            business_id=_optional_int(business_id),
            updated_at=parse_timestamp(data.get("updatedAt")),
            expires_at=parse_timestamp(data.get("expiresAt")),
            cancelled_at=parse_timestamp(data.get("cancelledAt")),
            picked_up_at=parse_timestamp(data.get("pickedUpAt")),
        )

    def with_product(self, product: Optional[ProductSummary]) -> "Reservation":
        return replace(self, product=product)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "productId": self.product_id,
            "businessId": self.business_id,
            "userId": self.user_id,
            "quantity": self.quantity,
            "status": self.status,
            "createdAt": _isoformat(self.created_at),
            "updatedAt": _isoformat(self.updated_at),
            "expiresAt": _isoformat(self.expires_at),
            "cancelledAt": _isoformat(self.cancelled_at),
            "pickedUpAt": _isoformat(self.picked_up_at),
            "product": self.product.to_dict() if self.product else None,
        }


class CancelBlockReason(str, Enum):
    EXPIRED_WINDOW = "expired_window"
    WRONG_STATUS = "wrong_status"
    UNKNOWN_AGE = "unknown_age"


@dataclass(frozen=True)
class CancelEligibility:
    """Result of the consumer cancellation gate: status and time window checked together."""

    eligible: bool
    minutes_left: int
    reason: Optional[CancelBlockReason] = None


@dataclass
class SessionUser:
    """Subset of the cached user profile the client needs."""

    id: int
    role: str
    name: Optional[str] = None
    email: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_consumer(self) -> bool:
        return self.role.upper() == "CONSUMER"

    @property
    def is_business(self) -> bool:
        return self.role.upper() == "BUSINESS"
