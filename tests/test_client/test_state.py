"""Tests for the client's serialized shared state."""

from __future__ import annotations

import asyncio
import gc
import threading

import pytest

from apiwire.client.state import ClientState, StateSnapshot


class TestSnapshot:
    @pytest.mark.asyncio
    async def test_initial_values(self, make_authenticator) -> None:
        auth = make_authenticator()
        state = ClientState({"Accept": "application/json"}, auth)
        snap = await state.snapshot()
        await state.aclose()

        assert snap == StateSnapshot(headers={"Accept": "application/json"}, authenticator=auth)

    @pytest.mark.asyncio
    async def test_empty_state(self) -> None:
        state = ClientState()
        snap = await state.snapshot()
        await state.aclose()

        assert snap.headers == {}
        assert snap.authenticator is None

    @pytest.mark.asyncio
    async def test_snapshot_is_a_copy(self) -> None:
        state = ClientState({"A": "1"})
        snap = await state.snapshot()
        snap.headers["B"] = "2"
        again = await state.snapshot()
        await state.aclose()

        assert again.headers == {"A": "1"}


class TestMutations:
    @pytest.mark.asyncio
    async def test_mutations_visible_in_submission_order(self) -> None:
        state = ClientState()
        state.set_header("X-Step", "1")
        state.set_header("X-Step", "2")
        state.set_header("X-Other", "o")
        state.remove_header("X-Other")
        snap = await state.snapshot()
        await state.aclose()

        assert snap.headers == {"X-Step": "2"}

    @pytest.mark.asyncio
    async def test_set_header_replaces_case_insensitively(self) -> None:
        state = ClientState({"content-type": "text/plain"})
        state.set_header("Content-Type", "application/json")
        snap = await state.snapshot()
        await state.aclose()

        assert snap.headers == {"Content-Type": "application/json"}

    @pytest.mark.asyncio
    async def test_remove_missing_header_is_noop(self) -> None:
        state = ClientState({"A": "1"})
        state.remove_header("B")
        snap = await state.snapshot()
        await state.aclose()

        assert snap.headers == {"A": "1"}

    @pytest.mark.asyncio
    async def test_set_and_clear_authenticator(self, make_authenticator) -> None:
        auth = make_authenticator()
        state = ClientState()
        state.set_authenticator(auth)
        first = await state.snapshot()
        state.set_authenticator(None)
        second = await state.snapshot()
        await state.aclose()

        assert first.authenticator is auth
        assert second.authenticator is None

    @pytest.mark.asyncio
    async def test_authenticator_is_weakly_held(self, make_authenticator) -> None:
        auth = make_authenticator()
        state = ClientState(authenticator=auth)
        assert (await state.snapshot()).authenticator is auth

        del auth
        gc.collect()
        snap = await state.snapshot()
        await state.aclose()

        assert snap.authenticator is None

    @pytest.mark.asyncio
    async def test_concurrent_readers_and_writers(self) -> None:
        state = ClientState()

        async def writer(i: int) -> None:
            state.set_header(f"X-{i}", str(i))
            await asyncio.sleep(0)

        await asyncio.gather(*(writer(i) for i in range(20)), *(state.snapshot() for _ in range(20)))
        snap = await state.snapshot()
        await state.aclose()

        assert snap.headers == {f"X-{i}": str(i) for i in range(20)}


class TestOutsideEventLoop:
    def test_mutations_apply_without_loop(self) -> None:
        state = ClientState()
        state.set_header("A", "1")
        state.set_header("a", "2")

        snap = asyncio.run(state.snapshot())

        assert snap.headers == {"a": "2"}

    def test_state_survives_across_event_loops(self) -> None:
        state = ClientState({"A": "1"})

        async def mutate_and_read() -> StateSnapshot:
            state.set_header("B", "2")
            return await state.snapshot()

        first = asyncio.run(mutate_and_read())
        state.remove_header("A")
        second = asyncio.run(state.snapshot())

        assert first.headers == {"A": "1", "B": "2"}
        assert second.headers == {"B": "2"}

    def test_mutation_from_another_thread(self) -> None:
        state = ClientState()

        async def main() -> StateSnapshot:
            await state.snapshot()
            thread = threading.Thread(target=state.set_header, args=("X-Thread", "yes"))
            thread.start()
            thread.join()
            # Let the handed-over mutation reach the inbox.
            await asyncio.sleep(0)
            snap = await state.snapshot()
            await state.aclose()
            return snap

        snap = asyncio.run(main())

        assert snap.headers == {"X-Thread": "yes"}

    def test_snapshot_from_another_loop_uses_live_worker(self) -> None:
        state = ClientState({"A": "1"})
        worker_loop = asyncio.new_event_loop()
        thread = threading.Thread(target=worker_loop.run_forever)
        thread.start()
        try:
            asyncio.run_coroutine_threadsafe(state.snapshot(), worker_loop).result(timeout=5)

            async def main() -> StateSnapshot:
                state.set_header("X-Other", "1")
                return await state.snapshot()

            snap = asyncio.run(main())

            assert snap.headers == {"A": "1", "X-Other": "1"}
            assert state._loop is worker_loop

            asyncio.run(state.aclose())
            assert state._loop is None
        finally:
            worker_loop.call_soon_threadsafe(worker_loop.stop)
            thread.join()
            worker_loop.close()


class TestClose:
    @pytest.mark.asyncio
    async def test_close_applies_pending_mutations(self) -> None:
        state = ClientState()
        await state.snapshot()
        state.set_header("Late", "1")
        await state.aclose()

        snap = await state.snapshot()
        await state.aclose()

        assert snap.headers == {"Late": "1"}

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self) -> None:
        state = ClientState()
        await state.aclose()
        await state.aclose()
