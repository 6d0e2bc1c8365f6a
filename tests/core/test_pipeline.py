"""Tests for behavior composition."""

from __future__ import annotations

from typing import Any

from switchyard.core.cancellation import CancellationToken
from switchyard.core.pipeline import FunctionBehavior, Next, PipelineBehavior, build_pipeline


class Recording(PipelineBehavior):
    def __init__(self, tag: str, log: list[str]) -> None:
        self.tag = tag
        self.log = log

    async def handle(self, request: Any, next_: Next, cancellation: CancellationToken) -> Any:
        self.log.append(f"{self.tag}:before")
        result = await next_()
        self.log.append(f"{self.tag}:after")
        return result


class ShortCircuit(PipelineBehavior):
    async def handle(self, request: Any, next_: Next, cancellation: CancellationToken) -> Any:
        return "cached"


class TestBuildPipeline:
    async def test_no_behaviors_calls_terminal(self, token: CancellationToken) -> None:
        async def terminal() -> str:
            return "done"

        assert await build_pipeline("req", [], terminal, token)() == "done"

    async def test_nesting_order(self, token: CancellationToken) -> None:
        log: list[str] = []

        async def terminal() -> str:
            log.append("handler")
            return "done"

        behaviors = [Recording("a", log), Recording("b", log), Recording("c", log)]
        result = await build_pipeline("req", behaviors, terminal, token)()

        assert result == "done"
        assert log == [
            "a:before",
            "b:before",
            "c:before",
            "handler",
            "c:after",
            "b:after",
            "a:after",
        ]

    async def test_short_circuit_skips_inner(self, token: CancellationToken) -> None:
        log: list[str] = []

        async def terminal() -> str:
            log.append("handler")
            return "fresh"

        behaviors = [Recording("outer", log), ShortCircuit(), Recording("inner", log)]
        result = await build_pipeline("req", behaviors, terminal, token)()

        assert result == "cached"
        assert log == ["outer:before", "outer:after"]

    async def test_behavior_can_transform_result(self, token: CancellationToken) -> None:
        async def shout(request: Any, next_: Next, cancellation: CancellationToken) -> Any:
            return (await next_()).upper()

        async def terminal() -> str:
            return "quiet"

        pipeline = build_pipeline("req", [FunctionBehavior(shout)], terminal, token)
        assert await pipeline() == "QUIET"

    async def test_behavior_sees_request_and_token(self, token: CancellationToken) -> None:
        seen: list[Any] = []

        async def spy(request: Any, next_: Next, cancellation: CancellationToken) -> Any:
            seen.extend([request, cancellation])
            return await next_()

        async def terminal() -> None:
            return None

        await build_pipeline("req", [FunctionBehavior(spy)], terminal, token)()
        assert seen == ["req", token]


class TestFunctionBehavior:
    def test_name_defaults_to_function_name(self) -> None:
        async def audit(request: Any, next_: Next, cancellation: CancellationToken) -> Any:
            return await next_()

        assert FunctionBehavior(audit).name == "audit"
        assert FunctionBehavior(audit, name="Audit").name == "Audit"

    def test_class_behavior_name(self) -> None:
        assert ShortCircuit().name == "ShortCircuit"

    def test_applies_everywhere_by_default(self) -> None:
        assert ShortCircuit().applies_to(str, int)
