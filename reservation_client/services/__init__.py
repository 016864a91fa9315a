from .catalog_service import CatalogService
from .notification_service import Alert, AlertType, NotificationService
from .reservation_service import (
    ReservationService,
    cancel_eligibility,
    status_color,
    status_label,
)
from .enrichment import join_reservations

__all__ = [
    "CatalogService",
    "Alert",
    "AlertType",
    "NotificationService",
    "ReservationService",
    "cancel_eligibility",
    "status_color",
    "status_label",
    "join_reservations",
]
