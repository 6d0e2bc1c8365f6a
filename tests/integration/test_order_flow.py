"""End-to-end dispatch through a fully assembled mediator."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from datetime import timedelta
from pathlib import Path

import pytest
from structlog.testing import capture_logs

from switchyard import (
    UNIT,
    CacheableRequest,
    CancellationToken,
    Command,
    FanOutFailure,
    HandlerRegistry,
    Notification,
    StreamRequest,
    ValidationFailed,
)
from switchyard.bootstrap import build_mediator
from switchyard.config.settings import SwitchyardSettings
from switchyard.domain.types import FieldError
from switchyard.result import Result


class PlaceOrder(Command):
    sku: str
    quantity: int


class OrderTotal(CacheableRequest[Result[int]]):
    sku: str

    @property
    def cache_key(self) -> str:
        return self.sku

    @property
    def cache_expiration(self) -> timedelta:
        return timedelta(minutes=5)


class OrderPlaced(Notification):
    sku: str
    quantity: int


class OrderHistory(StreamRequest[str]):
    pass


class Shop:
    """In-memory order book wired up the way an application would."""

    def __init__(self) -> None:
        self.orders: dict[str, int] = {}
        self.total_lookups = 0
        self.emails: list[str] = []
        self.audit: list[str] = []

    async def place(self, request: PlaceOrder, cancellation: CancellationToken) -> None:
        self.orders[request.sku] = self.orders.get(request.sku, 0) + request.quantity

    async def total(self, request: OrderTotal, cancellation: CancellationToken) -> Result[int]:
        self.total_lookups += 1
        if request.sku not in self.orders:
            return Result.failure(f"no orders for {request.sku}")
        return Result.success(self.orders[request.sku])

    async def history(
        self, request: OrderHistory, cancellation: CancellationToken
    ) -> AsyncIterator[str]:
        for sku, quantity in sorted(self.orders.items()):
            await asyncio.sleep(0)
            yield f"{sku}x{quantity}"

    async def email(self, notification: OrderPlaced, cancellation: CancellationToken) -> None:
        self.emails.append(notification.sku)

    async def record(self, notification: OrderPlaced, cancellation: CancellationToken) -> None:
        self.audit.append(notification.sku)

    @staticmethod
    def positive_quantity(request: PlaceOrder) -> list[FieldError]:
        if request.quantity <= 0:
            return [FieldError(field="quantity", message="must be positive")]
        return []

    def register(self, registry: HandlerRegistry) -> None:
        registry.add_request_handler(PlaceOrder, self.place)
        registry.add_request_handler(OrderTotal, self.total)
        registry.add_stream_handler(OrderHistory, self.history)
        registry.add_notification_handler(OrderPlaced, self.email)
        registry.add_notification_handler(OrderPlaced, self.record)
        registry.add_validator(PlaceOrder, self.positive_quantity)


@pytest.fixture
def shop() -> Shop:
    return Shop()


@pytest.fixture
def shop_mediator(shop: Shop, tmp_path: Path):
    registry = HandlerRegistry()
    shop.register(registry)
    settings = SwitchyardSettings.load(project_root=tmp_path)
    return build_mediator(settings, registry=registry, discover=False)


class TestOrderFlow:
    async def test_command_query_notification(self, shop: Shop, shop_mediator) -> None:
        assert await shop_mediator.send(PlaceOrder(sku="A1", quantity=2)) is UNIT
        await shop_mediator.publish(OrderPlaced(sku="A1", quantity=2))

        total = await shop_mediator.send(OrderTotal(sku="A1"))
        assert total.unwrap() == 2
        assert shop.emails == ["A1"]
        assert shop.audit == ["A1"]

    async def test_cached_result(self, shop: Shop, shop_mediator) -> None:
        await shop_mediator.send(PlaceOrder(sku="A1", quantity=1))
        first = await shop_mediator.send(OrderTotal(sku="A1"))
        await shop_mediator.send(PlaceOrder(sku="A1", quantity=1))
        second = await shop_mediator.send(OrderTotal(sku="A1"))

        assert first == second
        assert second.unwrap() == 1
        assert shop.total_lookups == 1

    async def test_expected_failure_as_result(self, shop_mediator) -> None:
        total = await shop_mediator.send(OrderTotal(sku="missing"))
        assert not total.ok
        assert total.unwrap_error() == "no orders for missing"

    async def test_invalid_command(self, shop: Shop, shop_mediator) -> None:
        with capture_logs() as logs, pytest.raises(ValidationFailed):
            await shop_mediator.send(PlaceOrder(sku="A1", quantity=0))
        assert shop.orders == {}
        events = [e["event"] for e in logs]
        assert "validation.failed" in events
        assert "request.failed" in events

    async def test_stream_history(self, shop_mediator) -> None:
        await shop_mediator.send(PlaceOrder(sku="B2", quantity=1))
        await shop_mediator.send(PlaceOrder(sku="A1", quantity=3))
        lines = [line async for line in shop_mediator.stream(OrderHistory())]
        assert lines == ["A1x3", "B2x1"]

    async def test_failing_subscriber_does_not_stop_others(
        self, shop: Shop, shop_mediator
    ) -> None:
        async def flaky(notification: OrderPlaced, cancellation: CancellationToken) -> None:
            raise RuntimeError("smtp down")

        shop_mediator.registry.add_notification_handler(OrderPlaced, flaky)
        with pytest.raises(FanOutFailure) as excinfo:
            await shop_mediator.publish(OrderPlaced(sku="A1", quantity=1))

        assert str(excinfo.value.first) == "smtp down"
        assert shop.emails == ["A1"]
        assert shop.audit == ["A1"]
