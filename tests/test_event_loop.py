"""
Tests del EventLoop dedicado que usa el limitador.

Estos tests verifican:
1. Que el loop vive en su propio thread y nunca toca el loop del llamador
2. call() y call_soon() como puente desde otros threads
3. Que shutdown() cancela el trabajo que quedó sin terminar
"""

import asyncio
import threading

import pytest
import uvloop

from sincpro_async_limit.infrastructure import EventLoop
from sincpro_async_limit.infrastructure.event_loop import THREAD_NAME


@pytest.fixture
def owned_loop():
    """
    Fixture que proporciona un EventLoop sin iniciar y lo cierra al final.
    """
    loop = EventLoop()
    yield loop
    if loop.is_running():
        loop.shutdown()


class TestLoopThread:
    """El loop corre en un thread daemon con nombre propio."""

    def test_lifecycle_reuses_one_loop_until_shutdown(self, owned_loop):
        # Given: un loop sin iniciar
        assert not owned_loop.is_running()

        # When: se inicia dos veces
        first = owned_loop.get_loop()
        owned_loop.start()

        # Then: sigue siendo el mismo loop hasta el shutdown
        assert owned_loop.get_loop() is first
        owned_loop.shutdown()
        assert not owned_loop.is_running()
        assert first.is_closed()

    def test_runs_on_named_daemon_thread(self, owned_loop):
        thread = owned_loop.call(threading.current_thread)

        assert thread is not threading.current_thread()
        assert thread.name == THREAD_NAME
        assert thread.daemon

    def test_loop_flavour_follows_uvloop_flag(self):
        fast = EventLoop(use_uvloop=True)
        plain = EventLoop(use_uvloop=False)
        try:
            assert isinstance(fast.get_loop(), uvloop.Loop)
            assert not isinstance(plain.get_loop(), uvloop.Loop)
        finally:
            fast.shutdown()
            plain.shutdown()

    def test_caller_loop_is_left_alone(self):
        """Un EventLoop creado dentro de asyncio.run() usa su propio loop."""

        async def caller():
            owned = EventLoop()
            try:
                assert owned.get_loop() is not asyncio.get_running_loop()
                future = owned.run_coroutine(asyncio.sleep(0, "from owned loop"))
                assert await asyncio.wrap_future(future) == "from owned loop"
            finally:
                owned.shutdown()

            # El loop del llamador sigue funcionando
            await asyncio.sleep(0)
            return "caller alive"

        assert asyncio.run(caller()) == "caller alive"


class TestCrossThreadCalls:
    """call() espera el resultado y call_soon() no espera."""

    def test_call_returns_value_computed_on_loop_thread(self, owned_loop):
        def add_on_loop(base, extra):
            return threading.current_thread().name, base + extra

        result = owned_loop.call(add_on_loop, 40, 2)

        assert result == (THREAD_NAME, 42)

    def test_call_propagates_errors_to_caller(self, owned_loop):
        def broken():
            raise KeyError("missing slot")

        with pytest.raises(KeyError, match="missing slot"):
            owned_loop.call(broken)

    def test_call_from_loop_thread_runs_inline(self, owned_loop):
        """Test que verifica que call() dentro del loop no se bloquea a sí mismo."""
        seen = []

        async def nested():
            assert owned_loop.in_loop_thread()
            value = owned_loop.call(seen.append, "inline")
            # Ya se ejecutó antes de volver
            return value, list(seen)

        future = owned_loop.run_coroutine(nested())

        assert future.result(timeout=1.0) == (None, ["inline"])
        assert not owned_loop.in_loop_thread()

    def test_call_soon_runs_callback_with_arguments(self, owned_loop):
        owned_loop.start()
        received = []
        done = threading.Event()

        def collect(first, second):
            received.append((first, second, threading.current_thread().name))
            done.set()

        owned_loop.call_soon(collect, "a", "b")

        assert done.wait(timeout=1.0)
        assert received == [("a", "b", THREAD_NAME)]

    def test_call_soon_is_ignored_when_not_running(self, owned_loop):
        called = []

        owned_loop.call_soon(called.append, "never")

        # No arranca el loop por su cuenta
        assert not owned_loop.is_running()
        assert called == []


class TestShutdown:
    """shutdown() detiene el loop y cancela lo pendiente."""

    def test_shutdown_cancels_unfinished_coroutines(self, owned_loop):
        # Given: una corrutina que nunca termina sola
        entered = threading.Event()
        cleaned_up = threading.Event()

        async def endless():
            entered.set()
            try:
                await asyncio.sleep(10)
            finally:
                cleaned_up.set()

        future = owned_loop.run_coroutine(endless())
        assert entered.wait(timeout=1.0)

        # When: se apaga el loop
        owned_loop.shutdown()

        # Then: la corrutina fue cancelada y su finally alcanzó a correr
        assert future.cancelled()
        assert cleaned_up.is_set()
        assert not owned_loop.is_running()

    def test_shutdown_without_start_is_harmless(self, owned_loop):
        owned_loop.shutdown()
        owned_loop.shutdown()

        assert not owned_loop.is_running()
        future = owned_loop.run_coroutine(asyncio.sleep(0, "restarted"))
        assert future.result(timeout=1.0) == "restarted"
