import asyncio
import json
import logging
from types import SimpleNamespace

from aiohttp import web
from aiohttp.test_utils import TestServer

from league_bot import logsink


def _record(msg="hello %s", args=("world",), **extra):
    record = logging.LogRecord("league_bot.test", logging.INFO, __file__, 1, msg, args, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def _handler(endpoint="http://unused", size=10):
    return logsink.RemoteLogHandler(
        endpoint=endpoint, license_key="lic", app_name="league-bot", buffer_size=size
    )


def test_json_formatter_includes_extra_fields():
    formatter = logsink.JsonFormatter({"service": "league-bot"})
    payload = json.loads(formatter.format(_record(guild="42", audit={"userId": 1})))

    assert payload["msg"] == "hello world"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "league_bot.test"
    assert payload["service"] == "league-bot"
    assert payload["guild"] == "42"
    assert payload["audit"] == {"userId": 1}
    assert "args" not in payload and "levelno" not in payload


def test_handler_buffer_is_bounded():
    handler = _handler(size=2)
    for index in range(3):
        handler.emit(_record("entry %d", (index,)))

    batch = handler.drain()
    assert [entry["message"] for entry in batch] == ["entry 1", "entry 2"]
    assert len(handler) == 0


def test_handler_ignores_its_own_records():
    handler = _handler()
    record = logging.LogRecord(logsink.__name__, logging.WARNING, __file__, 1, "dropped", (), None)
    handler.emit(record)
    assert len(handler) == 0


def test_flush_posts_batch_with_license_header():
    received = []

    async def ingest(request):
        received.append((request.headers.get("Api-Key"), await request.json()))
        return web.json_response({"requestId": "1"}, status=202)

    async def scenario():
        app = web.Application()
        app.router.add_post("/log/v1", ingest)
        async with TestServer(app) as server:
            handler = _handler(endpoint=str(server.make_url("/log/v1")))
            handler.emit(_record())
            shipped = await handler.flush_remote()
            empty = await handler.flush_remote()
            return shipped, empty

    shipped, empty = asyncio.run(scenario())
    assert (shipped, empty) == (1, 0)
    key, body = received[0]
    assert key == "lic"
    assert body[0]["common"]["attributes"]["service"] == "league-bot"
    assert body[0]["logs"][0]["message"] == "hello world"


def test_flush_failure_drops_batch_without_raising():
    async def reject(request):
        return web.Response(status=403)

    async def scenario():
        app = web.Application()
        app.router.add_post("/log/v1", reject)
        async with TestServer(app) as server:
            handler = _handler(endpoint=str(server.make_url("/log/v1")))
            handler.emit(_record())
            shipped = await handler.flush_remote()
            return shipped, len(handler)

    assert asyncio.run(scenario()) == (0, 0)


def test_install_respects_license_key():
    root = logging.getLogger("league_bot.test.install")
    disabled = SimpleNamespace(ENABLED=False)
    assert logsink.install(disabled, root) is None

    enabled = SimpleNamespace(
        ENABLED=True,
        NEW_RELIC_LOG_ENDPOINT="http://logs",
        NEW_RELIC_LICENSE_KEY="lic",
        NEW_RELIC_APP_NAME="league-bot",
        LOG_BUFFER_SIZE=5,
    )
    handler = logsink.install(enabled, root)
    try:
        assert handler in root.handlers
        root.warning("captured")
        assert len(handler) == 1
    finally:
        root.removeHandler(handler)
