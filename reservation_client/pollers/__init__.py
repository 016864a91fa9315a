from .business_poller import BusinessNotificationPoller
from .customer_poller import CustomerNotificationPoller
from .ticker import IntervalTicker, ManualTicker, Ticker

__all__ = [
    "BusinessNotificationPoller",
    "CustomerNotificationPoller",
    "IntervalTicker",
    "ManualTicker",
    "Ticker",
]
