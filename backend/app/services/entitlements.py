"""
Free-tier limits. Subscribers are never limited.
"""


class EntitlementService:
    def __init__(self, is_subscribed: bool = False, stock_limit: int = 5, category_limit: int = 2):
        self.is_subscribed = is_subscribed
        self.stock_limit = stock_limit
        self.category_limit = category_limit

    def can_add_stock_item(self, current_count: int) -> bool:
        """Whether one more stock item may be created when current_count exist."""
        return self.is_subscribed or current_count < self.stock_limit

    def can_add_category(self, current_count: int) -> bool:
        return self.is_subscribed or current_count < self.category_limit

    def set_subscribed(self, is_subscribed: bool) -> None:
        self.is_subscribed = is_subscribed

    def close(self) -> None:
        """Nothing to release; called with the other services on shutdown."""
