from typing import Any, Dict, List, Mapping

import pytest

from tracelog.utils.wrappers import immutable_wrap_async, immutable_wrap_sync


def test_sync_returns_original_result():
    def add(a: int, b: int) -> int:
        return a + b

    wrapped = immutable_wrap_sync(add)

    assert wrapped(2, 3) == 5
    assert wrapped.__name__ == "add"


def test_sync_hook_order_and_context():
    calls: List[str] = []
    seen: Dict[str, Any] = {}

    def pre(ctx: Dict[str, Any]) -> None:
        calls.append("pre")
        ctx["started"] = True

    def post(ctx: Mapping[str, Any], result: Any) -> None:
        calls.append("post")
        seen.update(ctx, result=result)

    def final(ctx: Mapping[str, Any]) -> None:
        calls.append("finally")

    wrapped = immutable_wrap_sync(
        lambda x, y=0: x * 2 + y, pre_hook=pre, post_hook=post, finally_hook=final
    )
    wrapped(4, y=1)

    assert calls == ["pre", "post", "finally"]
    assert seen["started"] is True
    assert seen["args"] == (4,)
    assert seen["kwargs"] == {"y": 1}
    assert seen["result"] == 9


def test_sync_error_hook_and_reraise():
    errors: List[Exception] = []
    finals: List[bool] = []

    def boom() -> None:
        raise ValueError("boom")

    wrapped = immutable_wrap_sync(
        boom,
        error_hook=lambda ctx, e: errors.append(e),
        finally_hook=lambda ctx: finals.append(True),
    )

    with pytest.raises(ValueError, match="boom"):
        wrapped()
    assert isinstance(errors[0], ValueError)
    assert finals == [True]


def test_failing_hooks_do_not_affect_the_call():
    def bad_hook(*_: Any) -> None:
        raise RuntimeError("hook failure")

    wrapped = immutable_wrap_sync(
        lambda: "ok",
        pre_hook=bad_hook,
        post_hook=bad_hook,
        finally_hook=bad_hook,
    )

    assert wrapped() == "ok"


def test_failing_error_hook_keeps_original_exception():
    def bad_hook(*_: Any) -> None:
        raise RuntimeError("hook failure")

    def boom() -> None:
        raise KeyError("original")

    wrapped = immutable_wrap_sync(boom, error_hook=bad_hook)

    with pytest.raises(KeyError):
        wrapped()


async def test_async_hooks():
    calls: List[str] = []

    async def fetch(x: int) -> int:
        return x + 1

    wrapped = immutable_wrap_async(
        fetch,
        pre_hook=lambda ctx: calls.append("pre"),
        post_hook=lambda ctx, result: calls.append(f"post:{result}"),
        finally_hook=lambda ctx: calls.append("finally"),
    )

    assert await wrapped(1) == 2
    assert calls == ["pre", "post:2", "finally"]


async def test_async_error_hook():
    errors: List[Exception] = []

    async def fail() -> None:
        raise TimeoutError("slow")

    wrapped = immutable_wrap_async(fail, error_hook=lambda ctx, e: errors.append(e))

    with pytest.raises(TimeoutError):
        await wrapped()
    assert isinstance(errors[0], TimeoutError)
