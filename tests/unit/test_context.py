"""Tests for the ambient log context."""

import asyncio
import threading

import pytest

from logrouter.core.context import (
    clear_log_context,
    get_log_context,
    push_properties,
    push_property,
    set_log_context,
    update_log_context,
)

pytestmark = [pytest.mark.unit, pytest.mark.tier(1)]


class TestContextFunctions:
    """Tests for get/set/update/clear."""

    def test_context_starts_empty(self) -> None:
        assert get_log_context() == {}

    def test_set_replaces_context(self) -> None:
        set_log_context(a=1)
        set_log_context(b=2)
        assert get_log_context() == {"b": 2}

    def test_update_merges_new_values(self) -> None:
        set_log_context(a=1, b=1)
        update_log_context(b=2, c=3)
        assert get_log_context() == {"a": 1, "b": 2, "c": 3}

    def test_clear_removes_everything(self) -> None:
        set_log_context(a=1)
        clear_log_context()
        assert get_log_context() == {}

    def test_get_returns_a_copy(self) -> None:
        set_log_context(a=1)
        get_log_context()["b"] = 2
        assert get_log_context() == {"a": 1}


class TestPushProperty:
    """Tests for scoped property pushes."""

    @pytest.mark.tra("Core.Context.Scope")
    def test_property_visible_inside_scope_only(self) -> None:
        with push_property("foobar", 1):
            assert get_log_context() == {"foobar": 1}
        assert get_log_context() == {}

    @pytest.mark.tra("Core.Context.Nesting")
    def test_nested_scopes_merge_innermost_wins(self) -> None:
        with push_properties(a=1, b=1):
            with push_properties(b=2, c=3):
                assert get_log_context() == {"a": 1, "b": 2, "c": 3}
            assert get_log_context() == {"a": 1, "b": 1}

    @pytest.mark.tra("Core.Context.Unwind")
    def test_scope_restored_when_block_raises(self) -> None:
        with pytest.raises(RuntimeError):
            with push_property("foobar", 1):
                raise RuntimeError("boom")
        assert get_log_context() == {}

    def test_property_names_need_not_be_identifiers(self) -> None:
        with push_property("request-id", "abc"):
            assert get_log_context() == {"request-id": "abc"}


class TestContextIsolation:
    """Ambient properties must not leak between call chains."""

    @pytest.mark.tra("Core.Context.ThreadIsolation")
    def test_other_threads_do_not_see_pushed_properties(self) -> None:
        seen: list[dict[str, object]] = []
        entered = threading.Event()
        release = threading.Event()

        def pusher() -> None:
            with push_property("foobar", 1):
                entered.set()
                release.wait(timeout=5)

        def observer() -> None:
            entered.wait(timeout=5)
            seen.append(get_log_context())
            release.set()

        threads = [threading.Thread(target=pusher), threading.Thread(target=observer)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5)

        assert seen == [{}]

    @pytest.mark.tra("Core.Context.TaskIsolation")
    async def test_concurrent_tasks_keep_their_own_properties(self) -> None:
        async def tagged(value: int) -> dict[str, object]:
            with push_property("job", value):
                await asyncio.sleep(0)
                return get_log_context()

        results = await asyncio.gather(tagged(1), tagged(2), tagged(3))

        assert results == [{"job": 1}, {"job": 2}, {"job": 3}]
        assert get_log_context() == {}
