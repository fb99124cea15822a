"""
Enumerations shared by models, services and API schemas
"""
import enum
from typing import Optional


class OrderStatus(str, enum.Enum):
    RECEIVED = "received"
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    FULFILLED = "fulfilled"
    RETURNED = "returned"
    REFUNDED = "refunded"
    CANCELED = "canceled"
    FAILED = "failed"
    ON_HOLD = "on_hold"


# Higher rank = needs attention sooner. Completed orders rank lowest.
STATUS_PRIORITY = {
    OrderStatus.FAILED: 9,
    OrderStatus.CANCELED: 9,
    OrderStatus.RETURNED: 8,
    OrderStatus.ON_HOLD: 7,
    OrderStatus.REFUNDED: 6,
    OrderStatus.PENDING: 5,
    OrderStatus.RECEIVED: 4,
    OrderStatus.PROCESSING: 3,
    OrderStatus.SHIPPED: 2,
    OrderStatus.DELIVERED: 1,
    OrderStatus.FULFILLED: 1,
}


def status_priority(status: Optional[OrderStatus]) -> int:
    """Rank of a status in STATUS_PRIORITY; a missing status counts as received."""
    return STATUS_PRIORITY[status or OrderStatus.RECEIVED]


class Platform(str, enum.Enum):
    AMAZON = "Amazon"
    CARBOOT = "Carboot Sale"
    CUSTOM = "Custom"
    DEPOP = "Depop"
    EBAY = "eBay"
    ETSY = "Etsy"
    MARKETPLACE = "Facebook Marketplace"
    GUMTREE = "Gumtree"
    NUMONDAY = "numonday"
    POSHMARK = "Poshmark"
    SHOPIFY = "Shopify"
    VINTED = "Vinted"


class Currency(str, enum.Enum):
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    JPY = "JPY"
    AUD = "AUD"
    CAD = "CAD"
    CHF = "CHF"
    CNY = "CNY"
    INR = "INR"


class DeliveryMethod(str, enum.Enum):
    COLLECTED = "Pick up"
    SHIPPED = "Delivery"


class ShippingCompany(str, enum.Enum):
    # UK/Europe
    ROYAL_MAIL = "Royal Mail"
    EVRI = "Evri"
    YODEL = "Yodel"
    DPD = "DPD"
    DHL = "DHL"
    UPS = "UPS"
    FEDEX = "FedEx"
    POSTNL = "PostNL"
    LA_POSTE = "La Poste"
    DEUTSCHE_POST = "Deutsche Post"
    # North America
    USPS = "USPS"
    CANADA_POST = "Canada Post"
    CUSTOM = "Custom"


class TemplateType(str, enum.Enum):
    STOCK_ITEM = "Stock Item"
    ORDER = "Order"


class ReminderTimePeriod(str, enum.Enum):
    """How long before an order's completion date the reminder fires."""
    FIFTEEN_MINUTES = "15_minutes"
    ONE_HOUR = "1_hour"
    FOUR_HOURS = "4_hours"
    TWELVE_HOURS = "12_hours"
    ONE_DAY = "1_day"
    TWO_DAYS = "2_days"
    ONE_WEEK = "1_week"

    @property
    def seconds(self) -> int:
        return _REMINDER_SECONDS[self]

    @property
    def label(self) -> str:
        return _REMINDER_LABELS[self]


_REMINDER_SECONDS = {
    ReminderTimePeriod.FIFTEEN_MINUTES: 15 * 60,
    ReminderTimePeriod.ONE_HOUR: 60 * 60,
    ReminderTimePeriod.FOUR_HOURS: 4 * 60 * 60,
    ReminderTimePeriod.TWELVE_HOURS: 12 * 60 * 60,
    ReminderTimePeriod.ONE_DAY: 24 * 60 * 60,
    ReminderTimePeriod.TWO_DAYS: 2 * 24 * 60 * 60,
    ReminderTimePeriod.ONE_WEEK: 7 * 24 * 60 * 60,
}

_REMINDER_LABELS = {
    ReminderTimePeriod.FIFTEEN_MINUTES: "15 minutes before",
    ReminderTimePeriod.ONE_HOUR: "1 hour before",
    ReminderTimePeriod.FOUR_HOURS: "4 hours before",
    ReminderTimePeriod.TWELVE_HOURS: "12 hours before",
    ReminderTimePeriod.ONE_DAY: "1 day before",
    ReminderTimePeriod.TWO_DAYS: "2 days before",
    ReminderTimePeriod.ONE_WEEK: "1 week before",
}
