"""Repository for the Order aggregate."""

from subscriptions.domain import subscriptions
from subscriptions.order.order import Order
from subscriptions.shared.calendar import DayRange, normalize


@subscriptions.repository(part_of=Order)
class OrderRepository:
    """Standard CRUD from the base repository, plus the lookups the lifecycle needs."""

    def find_by_subscriber(self, subscriber_id) -> list[Order]:
        return self._dao.query.filter(subscriber_id=str(subscriber_id)).all().items

    def find_overlapping(self, subscriber_id, period_start, period_end, exclude_id=None) -> list[Order]:
        """Orders of the subscriber whose period shares at least one day with the given one."""
        wanted = DayRange(normalize(period_start), normalize(period_end))
        return [
            order
            for order in self.find_by_subscriber(subscriber_id)
            if str(order.id) != str(exclude_id)
            and wanted.overlaps(DayRange(normalize(order.period_start), normalize(order.period_end)))
        ]

    def page_of_ids(self, offset: int, limit: int) -> list[str]:
        """Order identities in a stable order, one page at a time."""
        results = self._dao.query.order_by("id").offset(offset).limit(limit).all()
        return [str(order.id) for order in results.items]
