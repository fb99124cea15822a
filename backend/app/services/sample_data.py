"""
Sample data for demo mode.

SampleDataGenerator builds a self-contained set of categories, stock items and
orders. Every order item points at a stock item from the same set, and the
order dates cover today, this week, the past year and the next few days so
dashboards and the calendar have something to show. Nothing is written to
the database unless load_into_session() is called.

DemoDataService caches one generated set and decides whether reads come from
it or from the database.
"""
import logging
import random
import uuid
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.enums import Currency, DeliveryMethod, OrderStatus, Platform
from app.models.stock import Category, Order, OrderItem, StockItem, utcnow

logger = logging.getLogger(__name__)

PRODUCT_NAMES = [
    "Vintage Nike Air Jordan 1", "Apple iPhone 13 Case", "Adidas Ultraboost Sneakers",
    "Samsung Galaxy Watch", "Sony WH-1000XM4 Headphones", "MacBook Pro Sleeve",
    "Champion Hoodie", "Levi's 501 Jeans", "Ray-Ban Sunglasses", "Fossil Watch",
    "North Face Jacket", "Converse Chuck Taylor", "Under Armour T-Shirt",
    "Patagonia Backpack", "Yeezy Boost 350", "AirPods Pro Case", "Nike Dunk Low",
    "Vans Old Skool", "Supreme Box Logo Tee", "Carhartt Work Jacket",
    "Timberland Boots", "New Balance 574", "Jordan 4 Retro", "Off-White Hoodie",
    "Balenciaga Triple S", "Gucci Belt", "Louis Vuitton Wallet", "Chanel Bag",
    "Rolex Submariner", "Omega Speedmaster", "Vintage Vinyl Record",
    "Gaming Mouse", "Mechanical Keyboard", "iPhone Charger", "Wireless Earbuds",
    "Smartphone Grip", "Laptop Stand", "USB-C Hub", "Power Bank", "Bluetooth Speaker",
    "Fitness Tracker", "Running Shoes", "Yoga Mat", "Protein Shaker", "Gym Bag",
    "Baseball Cap", "Beanie Hat", "Leather Wallet", "Crossbody Bag", "Tote Bag",
]

CUSTOMER_NAMES = [
    "John Smith", "Emma Johnson", "Michael Brown", "Sarah Davis", "David Wilson",
    "Lisa Anderson", "James Miller", "Jennifer Taylor", "Robert Thomas", "Mary Jackson",
    "Christopher White", "Patricia Harris", "Matthew Martin", "Linda Thompson", "Daniel Garcia",
    "Barbara Martinez", "Paul Robinson", "Susan Clark", "Mark Rodriguez", "Nancy Lewis",
]

SHIPPING_METHODS = [
    "Royal Mail 1st Class", "Royal Mail 2nd Class", "DPD Next Day", "Evri 48hr",
    "UPS Express", "DHL Express",
]

CATEGORY_DATA = [
    ("Electronics", "#007AFF", "desktopcomputer"),
    ("Clothing", "#FF3B30", "tshirt"),
    ("Footwear", "#FF9500", "shoe"),
    ("Accessories", "#FFCC02", "eyeglasses"),
    ("Vintage", "#32D74B", "clock"),
    ("Gaming", "#5856D6", "gamecontroller"),
    ("Books", "#AF52DE", "book"),
    ("Sports", "#FF2D92", "figure.run"),
    ("Beauty", "#A2845E", "sparkles"),
    ("Home & Garden", "#8E8E93", "house"),
]

# First matching rule wins; products matching nothing get a random category
CATEGORY_KEYWORDS = [
    ("Electronics", ("iphone", "samsung", "apple", "macbook", "airpods", "headphones",
                     "watch", "charger", "speaker", "mouse", "keyboard", "usb",
                     "power bank", "hub", "stand", "grip", "tracker", "earbuds")),
    ("Footwear", ("jordan", "sneakers", "shoes", "boots", "ultraboost", "converse", "vans",
                  "yeezy", "dunk", "new balance", "timberland", "balenciaga", "running")),
    ("Clothing", ("hoodie", "jeans", "t-shirt", "tee", "jacket", "champion", "north face",
                  "supreme", "carhartt", "off-white", "cap", "beanie")),
    ("Gaming", ("gaming", "mouse", "mechanical keyboard")),
    ("Sports", ("fitness", "yoga", "protein", "gym", "running")),
    ("Accessories", ("sunglasses", "watch", "wallet", "bag", "belt", "backpack", "case",
                     "ray-ban", "fossil", "gucci", "louis vuitton", "chanel")),
    ("Vintage", ("vintage", "rolex", "omega", "vinyl")),
]

# Fallback matches when an order keyword is not in any product name
KEYWORD_ALTERNATIVES = {
    "iphone": ("iphone", "apple"),
    "jordan": ("jordan", "nike"),
    "macbook": ("macbook", "laptop"),
    "airpods": ("airpods", "earbuds"),
    "watch": ("watch", "apple"),
    "headphones": ("headphones", "sony"),
    "tablet": ("ipad", "tablet"),
    "camera": ("camera", "lens"),
    "dress": ("hoodie", "jacket", "tee", "shirt", "jeans"),
    "jacket": ("hoodie", "jacket", "tee", "shirt", "jeans"),
    "sneakers": ("sneakers", "shoes", "boots", "converse", "vans", "nike"),
    "bag": ("wallet", "bag", "belt", "watch", "sunglasses"),
    "sunglasses": ("sunglasses", "ray-ban"),
}

ATTRIBUTE_CHOICES = {
    "Color": ["Black", "White", "Red", "Blue", "Green", "Navy", "Grey"],
    "Size": ["XS", "S", "M", "L", "XL", "XXL", "6", "7", "8", "9", "10", "11", "12"],
    "Condition": ["New", "Like New", "Good", "Fair", "Vintage"],
    "Brand": ["Nike", "Adidas", "Apple", "Samsung", "Sony", "Unbranded"],
}

HISTORY_PLATFORMS = [Platform.AMAZON, Platform.EBAY, Platform.ETSY, Platform.MARKETPLACE, Platform.VINTED]
HISTORY_STATUSES = [
    OrderStatus.FULFILLED, OrderStatus.FULFILLED, OrderStatus.FULFILLED, OrderStatus.PROCESSING,
    OrderStatus.PENDING, OrderStatus.SHIPPED, OrderStatus.RECEIVED, OrderStatus.CANCELED,
]
HISTORY_KEYWORDS = ["iPhone", "Jordan", "MacBook", "AirPods", "Watch", "Headphones",
                    "Tablet", "Camera", "Dress", "Jacket"]
UPCOMING_KEYWORDS = ["iPhone", "Jordan", "Sneakers", "Watch", "Headphones", "Jacket",
                     "Tablet", "Camera", "Bag", "Sunglasses"]

# (max age in days, [(status, weight), ...]); older orders use the last row
STATUS_WEIGHTS_BY_AGE = [
    (2, [(OrderStatus.RECEIVED, 30), (OrderStatus.PENDING, 20), (OrderStatus.PROCESSING, 25),
         (OrderStatus.SHIPPED, 15), (OrderStatus.FULFILLED, 10)]),
    (7, [(OrderStatus.PROCESSING, 20), (OrderStatus.SHIPPED, 30), (OrderStatus.DELIVERED, 25),
         (OrderStatus.FULFILLED, 25)]),
    (30, [(OrderStatus.DELIVERED, 30), (OrderStatus.FULFILLED, 60), (OrderStatus.RETURNED, 8),
          (OrderStatus.REFUNDED, 2)]),
    (None, [(OrderStatus.FULFILLED, 80), (OrderStatus.DELIVERED, 10), (OrderStatus.RETURNED, 5),
            (OrderStatus.REFUNDED, 3), (OrderStatus.CANCELED, 2)]),
]

HISTORY_ORDER_COUNT = 75
HISTORY_COMPLETED_COUNT = 37
UPCOMING_ORDER_COUNT = 8
TODAY_ORDER_COUNT = 5
THIS_WEEK_ORDER_COUNT = 20

CENT = Decimal("0.01")


def _money(value: float) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


class SampleData:
    """One generated set of related records."""

    def __init__(self, categories: List[Category], stock_items: List[StockItem], orders: List[Order]):
        self.categories = categories
        self.stock_items = stock_items
        self.orders = orders


class SampleDataGenerator:
    def __init__(self, seed: Optional[int] = None, now: Optional[datetime] = None):
        self.rng = random.Random(seed)
        self.now = now or utcnow()

    def generate(self) -> SampleData:
        categories = self.generate_categories()
        stock_items = self.generate_stock_items(categories)
        orders = self.generate_orders(stock_items)
        logger.debug(
            "Generated sample data: %d categories, %d stock items, %d orders",
            len(categories), len(stock_items), len(orders),
        )
        return SampleData(categories, stock_items, orders)

    # === Categories and stock ===

    def generate_categories(self) -> List[Category]:
        return [
            Category(id=uuid.uuid4(), name=name, color_hex=color, icon=icon)
            for name, color, icon in CATEGORY_DATA
        ]

    def generate_stock_items(self, categories: Sequence[Category]) -> List[StockItem]:
        items = []
        for name in PRODUCT_NAMES:
            cost = self.rng.uniform(5, 400)
            markup = self.rng.uniform(1.05, 1.25)
            price = min(cost * markup, 500.0)
            item = StockItem(
                id=uuid.uuid4(),
                name=name,
                quantity_available=self.rng.randint(0, 50),
                price=_money(price),
                cost=_money(cost),
                currency=Currency.GBP,
                attributes=self._random_attributes(),
            )
            item.category = self._category_for_product(name, categories)
            items.append(item)
        return items

    def _category_for_product(self, name: str, categories: Sequence[Category]) -> Optional[Category]:
        by_name = {c.name: c for c in categories}
        lowered = name.lower()
        for category_name, keywords in CATEGORY_KEYWORDS:
            if any(k in lowered for k in keywords):
                return by_name.get(category_name)
        return self.rng.choice(list(categories)) if categories else None

    def _random_attributes(self) -> Dict[str, str]:
        attributes = {}
        for key, choices in ATTRIBUTE_CHOICES.items():
            if self.rng.random() < 0.5:
                attributes[key] = self.rng.choice(choices)
        return attributes

    # === Orders ===

    def generate_orders(self, stock_items: Sequence[StockItem]) -> List[Order]:
        orders = []
        orders.extend(self._recent_orders(stock_items))
        orders.extend(self._history_orders(stock_items))
        orders.extend(self._upcoming_orders(stock_items))
        return orders

    def _recent_orders(self, stock_items: Sequence[StockItem]) -> List[Order]:
        """Orders placed today and over the last six days, for dashboard metrics."""
        start_of_today = self.now.replace(hour=0, minute=0, second=0, microsecond=0)
        seconds_today = max(int((self.now - start_of_today).total_seconds()), 1)
        orders = []
        for index in range(TODAY_ORDER_COUNT + THIS_WEEK_ORDER_COUNT):
            if index < TODAY_ORDER_COUNT:
                received = start_of_today + timedelta(seconds=self.rng.randrange(seconds_today))
            else:
                received = self.now - timedelta(
                    days=self.rng.randint(1, 6),
                    hours=self.rng.randint(0, 23),
                    minutes=self.rng.randint(0, 59),
                )
            status = self.realistic_status(received)
            platform = self.rng.choice(list(Platform))
            order = self._build_order(
                index=index + 1,
                received=received,
                status=status,
                platform=platform,
                customer=self.rng.choice(CUSTOMER_NAMES),
            )
            stock_item = self.rng.choice(list(stock_items))
            self._add_item(order, stock_item, self.rng.randint(1, 3))
            self._apply_costs(order, completed=status == OrderStatus.FULFILLED)
            orders.append(order)
        return orders

    def _history_orders(self, stock_items: Sequence[StockItem]) -> List[Order]:
        """Orders spread across the past year; the first batch is fulfilled."""
        customers = ["Ryan Hill", "Zoe Green", "Tyler Adams", "Chloe Baker", "Mason Gonzalez",
                     "Lily Nelson", "Ethan Carter", "Stella Mitchell", "Logan Perez", "Nora Roberts"]
        orders = []
        for i in range(HISTORY_ORDER_COUNT):
            completed = i < HISTORY_COMPLETED_COUNT
            received = self.now - timedelta(days=45 + i * 4) + timedelta(hours=(i * 3) % 24)
            order = self._build_order(
                index=26 + i,
                received=received,
                status=OrderStatus.FULFILLED if completed else HISTORY_STATUSES[i % len(HISTORY_STATUSES)],
                platform=HISTORY_PLATFORMS[i % len(HISTORY_PLATFORMS)],
                customer=customers[i % len(customers)],
            )
            stock_item = self.match_stock_item(HISTORY_KEYWORDS[i % len(HISTORY_KEYWORDS)], stock_items)
            self._add_item(order, stock_item, self.rng.randint(1, 3))
            self._apply_costs(order, completed=completed)
            if completed:
                order.tracking_reference = f"TRK{26 + i}"
            orders.append(order)
        return orders

    def _upcoming_orders(self, stock_items: Sequence[StockItem]) -> List[Order]:
        """Received but not yet handled, dated over the next four days."""
        customers = ["Alex Thompson", "Jessica Lee", "Marcus Wilson", "Sophie Clark", "Daniel Rodriguez",
                     "Emma Davis", "Ryan Martinez", "Olivia Garcia", "Lucas Anderson", "Maya Patel"]
        orders = []
        for i in range(UPCOMING_ORDER_COUNT):
            received = (self.now + timedelta(days=(i % 4) + 1)).replace(
                hour=(i * 3 + 8) % 24, minute=0, second=0, microsecond=0
            )
            order = self._build_order(
                index=101 + i,
                received=received,
                status=OrderStatus.RECEIVED,
                platform=HISTORY_PLATFORMS[i % len(HISTORY_PLATFORMS)],
                customer=customers[i % len(customers)],
            )
            order.delivery_method = DeliveryMethod.COLLECTED
            stock_item = self.match_stock_item(UPCOMING_KEYWORDS[i % len(UPCOMING_KEYWORDS)], stock_items)
            self._add_item(order, stock_item, self.rng.randint(1, 2))
            orders.append(order)
        return orders

    def _build_order(self, index: int, received: datetime, status: OrderStatus,
                     platform: Platform, customer: str) -> Order:
        return Order(
            id=uuid.uuid4(),
            order_received_date=received,
            order_reference=self.order_reference(index, platform),
            customer_name=customer,
            status=status,
            platform=platform,
            shipping_cost=Decimal("0"),
            selling_fees=Decimal("0"),
            transaction_fees=Decimal("0"),
            other_costs=Decimal("0"),
            additional_costs=Decimal("0"),
            customer_shipping_charge=Decimal("0"),
            delivery_method=DeliveryMethod.SHIPPED,
            reminder_enabled=False,
            reminder_time_before_completion=24 * 60 * 60,
            attributes={},
        )

    def _add_item(self, order: Order, stock_item: StockItem, quantity: int) -> None:
        order.items.append(OrderItem(id=uuid.uuid4(), quantity=quantity, stock_item=stock_item))

    def _apply_costs(self, order: Order, completed: bool) -> None:
        """Fees and shipping only exist once an order has been fulfilled."""
        if not completed:
            return
        order.shipping_cost = _money(self.rng.uniform(2.99, 7.99))
        order.selling_fees = _money(float(order.items_total) * 0.08)
        order.customer_shipping_charge = _money(self.rng.uniform(3.99, 8.99))
        if self.rng.random() < 0.5:
            order.additional_costs = _money(self.rng.uniform(0, 5))
        order.shipping_method = self.rng.choice(SHIPPING_METHODS)
        order.order_completion_date = min(
            order.order_received_date + timedelta(days=self.rng.randint(1, 5)),
            self.now,
        )

    def match_stock_item(self, keyword: str, stock_items: Sequence[StockItem]) -> StockItem:
        """First stock item matching the keyword, then its alternatives, else a random one."""
        lowered = keyword.lower()
        for item in stock_items:
            if lowered in item.name.lower():
                return item
        for alternative in KEYWORD_ALTERNATIVES.get(lowered, ()):
            for item in stock_items:
                if alternative in item.name.lower():
                    return item
        return self.rng.choice(list(stock_items))

    def realistic_status(self, received: datetime) -> OrderStatus:
        """Newer orders sit in earlier stages; older ones are mostly fulfilled."""
        age_days = (self.now - received).days
        weights = STATUS_WEIGHTS_BY_AGE[-1][1]
        for max_age, row in STATUS_WEIGHTS_BY_AGE[:-1]:
            if age_days <= max_age:
                weights = row
                break
        return self.weighted_choice(weights)

    def weighted_choice(self, choices: Sequence[Tuple[OrderStatus, int]]) -> OrderStatus:
        statuses = [c for c, _ in choices]
        weights = [w for _, w in choices]
        return self.rng.choices(statuses, weights=weights, k=1)[0]

    def order_reference(self, index: int, platform: Platform) -> str:
        if platform == Platform.EBAY:
            return f"EB-{100000 + index:06d}"
        if platform == Platform.AMAZON:
            return f"AMZ-{self.rng.randint(100, 999):03d}-{1000000 + index:07d}"
        if platform == Platform.VINTED:
            return f"VT{10000000 + index:08d}"
        if platform == Platform.SHOPIFY:
            return f"#{1000 + index:04d}"
        if platform == Platform.ETSY:
            return f"ET{1000000000 + index:010d}"
        if platform == Platform.DEPOP:
            return f"DP{1000000 + index:07d}"
        return f"ORD-{10000 + index:05d}"


class DemoDataService:
    """
    Chooses between sample data and the database for reads.
    The cached sample set is dropped whenever demo mode is switched on or off.
    """

    def __init__(self, enabled: bool = False, seed: Optional[int] = None):
        self._enabled = enabled
        self._seed = seed
        self._sample: Optional[SampleData] = None

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled
        self.clear_cache()
        logger.info("Demo mode %s", "enabled" if enabled else "disabled")

    def clear_cache(self) -> None:
        self._sample = None

    def force_refresh(self) -> SampleData:
        self.clear_cache()
        return self.sample

    @property
    def sample(self) -> SampleData:
        if self._sample is None:
            self._sample = SampleDataGenerator(seed=self._seed).generate()
        return self._sample

    def close(self) -> None:
        self.clear_cache()

    # === Reads ===

    async def get_orders(self, db: AsyncSession) -> List[Order]:
        """Newest first."""
        if self._enabled:
            return sorted(self.sample.orders, key=lambda o: o.order_received_date, reverse=True)
        result = await db.execute(
            select(Order)
            .options(selectinload(Order.items).selectinload(OrderItem.stock_item))
            .order_by(Order.order_received_date.desc())
        )
        return list(result.scalars().all())

    async def get_stock_items(self, db: AsyncSession) -> List[StockItem]:
        if self._enabled:
            return sorted(self.sample.stock_items, key=lambda s: s.name)
        result = await db.execute(
            select(StockItem).options(selectinload(StockItem.category)).order_by(StockItem.name)
        )
        return list(result.scalars().all())

    async def get_categories(self, db: AsyncSession) -> List[Category]:
        if self._enabled:
            return sorted(self.sample.categories, key=lambda c: c.name)
        result = await db.execute(select(Category).order_by(Category.name))
        return list(result.scalars().all())

    @staticmethod
    def search_orders(orders: Sequence[Order], search_text: str) -> List[Order]:
        """Case-insensitive match on customer, reference, platform and status."""
        if not search_text:
            return list(orders)
        needle = search_text.lower()
        matches = []
        for order in orders:
            haystack = " ".join(
                part for part in (
                    order.customer_name,
                    order.order_reference,
                    order.platform.value if order.platform else None,
                    order.status.value if order.status else None,
                ) if part
            ).lower()
            if needle in haystack:
                matches.append(order)
        return matches

    @staticmethod
    def search_stock_items(stock_items: Sequence[StockItem], search_text: str) -> List[StockItem]:
        """Case-insensitive match on name and attribute values."""
        if not search_text:
            return list(stock_items)
        needle = search_text.lower()
        return [
            item for item in stock_items
            if needle in " ".join([item.name, *(item.attributes or {}).values()]).lower()
        ]

    # === Seeding ===

    async def load_into_session(self, db: AsyncSession) -> SampleData:
        """
        Replace all persisted stock, categories and orders with a fresh sample set.
        Demo mode is left as it is; the loaded rows are ordinary data.
        """
        await db.execute(delete(OrderItem))
        await db.execute(delete(Order))
        await db.execute(delete(StockItem))
        await db.execute(delete(Category))

        data = SampleDataGenerator(seed=self._seed).generate()
        db.add_all(data.categories)
        db.add_all(data.stock_items)
        db.add_all(data.orders)
        await db.commit()
        logger.info(
            "Loaded sample data: %d categories, %d stock items, %d orders",
            len(data.categories), len(data.stock_items), len(data.orders),
        )
        return data
