import asyncio
import logging
import signal
import threading

import httpx
import pytest

from vanity.core.http import Http
from vanity.core.store import ConfigStore
from vanity.watchers.refresh import Reloader, register_reload_signal, reload_safely, run_interval, run_signals

URL = "https://config.example.com/vanity.yaml"
DEEPLY_NESTED = b"/foo: " + b"[" * 50000 + b"]" * 50000 + b"\n"


class Counting:
    """Reloader stand-in that records calls."""

    def __init__(self):
        self.calls = 0

    async def reload(self):
        self.calls += 1
        await asyncio.sleep(0)
        return True


def disk_reloader(path, store):
    return Reloader(str(path), store, Http(transport=httpx.MockTransport(lambda r: httpx.Response(500))))


def test_reload_installs_mapping(config_file):
    store = ConfigStore()

    async def go():
        reloader = disk_reloader(config_file, store)
        try:
            return await reloader.reload()
        finally:
            await reloader.http.close()

    assert asyncio.run(go()) is True
    assert store.lookup("/foo").repo == "https://github.com/org/foo"
    assert store.generation == 1


def test_failed_reload_keeps_previous_mapping(config_file, caplog):
    store = ConfigStore()

    async def go():
        reloader = disk_reloader(config_file, store)
        try:
            assert await reloader.reload()
            config_file.write_bytes(b"/foo:\n  display: no repo here\n")
            return await reloader.reload()
        finally:
            await reloader.http.close()

    with caplog.at_level(logging.ERROR):
        assert asyncio.run(go()) is False
    assert store.lookup("/foo").repo == "https://github.com/org/foo"
    assert store.generation == 1
    assert "refresh failed" in caplog.text


def test_http_500_on_first_load_leaves_store_empty(caplog):
    store = ConfigStore()

    async def go():
        http = Http(transport=httpx.MockTransport(lambda r: httpx.Response(500)))
        try:
            return await Reloader(URL, store, http).reload()
        finally:
            await http.close()

    with caplog.at_level(logging.ERROR):
        assert asyncio.run(go()) is False
    assert len(store) == 0
    assert "500" in caplog.text


def test_every_signal_triggers_its_own_reload():
    reloader = Counting()

    async def go():
        queue = asyncio.Queue()
        for _ in range(3):
            queue.put_nowait(signal.SIGHUP)
        task = asyncio.create_task(run_signals(reloader, queue))
        await asyncio.wait_for(queue.join(), 2)
        task.cancel()

    asyncio.run(go())
    assert reloader.calls == 3


def test_interval_loop_reloads_periodically():
    reloader = Counting()

    async def go():
        task = asyncio.create_task(run_interval(reloader, 0.01))
        await asyncio.sleep(0.1)
        task.cancel()

    asyncio.run(go())
    assert reloader.calls >= 2


@pytest.mark.skipif(not hasattr(signal, "SIGHUP"), reason="no SIGHUP on this platform")
def test_sighup_enqueues_reload_request():
    async def go():
        queue = asyncio.Queue()
        loop = asyncio.get_running_loop()
        assert register_reload_signal(loop, queue)
        try:
            signal.raise_signal(signal.SIGHUP)
            return await asyncio.wait_for(queue.get(), 2)
        finally:
            loop.remove_signal_handler(signal.SIGHUP)

    assert asyncio.run(go()) == signal.SIGHUP


def test_signal_registration_off_main_thread_is_reported():
    result = []

    def worker():
        async def go():
            result.append(register_reload_signal(asyncio.get_running_loop(), asyncio.Queue()))
        asyncio.run(go())

    t = threading.Thread(target=worker)
    t.start()
    t.join(5)
    assert result == [False]


class Exploding:
    """Reloader stand-in whose first reload raises something unexpected."""

    def __init__(self):
        self.store = ConfigStore()
        self.calls = 0

    async def reload(self):
        self.calls += 1
        if self.calls == 1:
            raise ValueError("boom")
        return True


def test_deeply_nested_document_fails_reload_cleanly(config_file):
    store = ConfigStore()
    config_file.write_bytes(DEEPLY_NESTED)

    async def go():
        reloader = disk_reloader(config_file, store)
        try:
            return await reloader.reload()
        finally:
            await reloader.http.close()

    assert asyncio.run(go()) is False
    assert len(store) == 0


def test_interval_loop_picks_up_fixed_file_after_bad_one(config_file):
    store = ConfigStore()
    config_file.write_bytes(DEEPLY_NESTED)

    async def go():
        reloader = disk_reloader(config_file, store)
        task = asyncio.create_task(run_interval(reloader, 0.01))
        try:
            await asyncio.sleep(0.1)
            assert not task.done()
            config_file.write_bytes(b"/foo:\n  repo: https://github.com/org/foo\n")
            for _ in range(200):
                if store.generation:
                    break
                await asyncio.sleep(0.01)
            assert not task.done()
        finally:
            task.cancel()
            await reloader.http.close()

    asyncio.run(go())
    assert store.lookup("/foo").repo == "https://github.com/org/foo"


def test_unexpected_error_is_logged_and_returns_false(caplog):
    reloader = Exploding()
    with caplog.at_level(logging.ERROR):
        assert asyncio.run(reload_safely(reloader)) is False
    assert "refresh crashed" in caplog.text
    assert "boom" in caplog.text


def test_interval_loop_survives_unexpected_error():
    reloader = Exploding()

    async def go():
        task = asyncio.create_task(run_interval(reloader, 0.01))
        await asyncio.sleep(0.1)
        alive = not task.done()
        task.cancel()
        return alive

    assert asyncio.run(go())
    assert reloader.calls >= 2


def test_signal_loop_survives_unexpected_error():
    reloader = Exploding()

    async def go():
        queue = asyncio.Queue()
        queue.put_nowait(signal.SIGHUP)
        queue.put_nowait(signal.SIGHUP)
        task = asyncio.create_task(run_signals(reloader, queue))
        await asyncio.wait_for(queue.join(), 2)
        alive = not task.done()
        task.cancel()
        return alive

    assert asyncio.run(go())
    assert reloader.calls == 2
