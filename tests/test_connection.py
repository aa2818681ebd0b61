import asyncio
import json

from connection import Connection
from stats import SEND_FAILED


class StubWebSocket:
    def __init__(self, fail=False, hang=False, fail_close=False):
        self.fail = fail
        self.hang = hang
        self.fail_close = fail_close
        self.sent = []
        self.send_attempts = 0
        self.close_calls = 0

    @property
    def closed(self):
        return self.close_calls > 0

    async def send_text(self, text):
        self.send_attempts += 1
        if self.hang:
            # client stopped reading
            await asyncio.Event().wait()
        if self.fail:
            raise RuntimeError("socket gone")
        self.sent.append(json.loads(text))

    async def close(self):
        self.close_calls += 1
        if self.fail_close:
            raise RuntimeError("already closed")


async def _settle():
    for _ in range(10):
        await asyncio.sleep(0)


async def test_frames_written_in_order(stats):
    ws = StubWebSocket()
    conn = Connection(ws, stats=stats)
    conn.start()

    conn.send({"type": "ping"})
    conn.send({"type": "peers", "peers": []})
    await _settle()

    assert ws.sent == [{"type": "ping"}, {"type": "peers", "peers": []}]
    conn.close()
    await conn.wait_closed()


async def test_send_after_close_is_noop(stats):
    ws = StubWebSocket()
    conn = Connection(ws, stats=stats)
    conn.start()

    conn.close()
    conn.send({"type": "ping"})
    await conn.wait_closed()

    assert conn.closed
    assert ws.closed
    assert ws.send_attempts == 0
    assert stats.drops() == {}


async def test_send_failure_is_counted_and_writer_keeps_running(stats):
    ws = StubWebSocket(fail=True)
    conn = Connection(ws, stats=stats)
    conn.start()

    conn.send({"type": "ping"})
    await _settle()

    assert stats.drops() == {SEND_FAILED: 1}
    assert not conn._writer.done()

    ws.fail = False
    conn.send({"type": "ping"})
    await _settle()
    assert ws.sent == [{"type": "ping"}]

    conn.close()
    await conn.wait_closed()


async def test_repeated_close_closes_socket_once(stats):
    ws = StubWebSocket()
    conn = Connection(ws, stats=stats)
    conn.start()

    conn.close()
    conn.close()
    await conn.wait_closed()
    conn.close()

    assert ws.close_calls == 1


async def test_close_error_is_swallowed(stats):
    ws = StubWebSocket(fail_close=True)
    conn = Connection(ws, stats=stats)
    conn.start()

    conn.close()
    await conn.wait_closed()

    assert ws.close_calls == 1


async def test_close_does_not_wait_for_stuck_writer(stats):
    ws = StubWebSocket(hang=True)
    conn = Connection(ws, stats=stats)
    conn.start()

    conn.send({"type": "ping"})
    conn.send({"type": "ping"})
    await _settle()
    assert ws.send_attempts == 1

    conn.close()
    await asyncio.wait_for(conn.wait_closed(), timeout=0.5)

    assert ws.closed
    assert conn._writer.cancelled()
    assert ws.send_attempts == 1
