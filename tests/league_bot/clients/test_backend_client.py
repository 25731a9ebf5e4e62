import asyncio

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from league_bot import errors
from league_bot.clients.backend import BackendClient, BackendError
from league_bot.models import GuildSnapshot

API_KEY = "secret"


def _app(seen):
    async def health(request):
        seen.append((request.method, request.path, request.headers.get("Authorization"), None))
        return web.json_response({"status": "ok", "message": "healthy", "timestamp": "now"})

    async def create_guild(request):
        body = await request.json()
        seen.append((request.method, request.path, request.headers.get("Authorization"), body))
        if body["id"] == "409":
            return web.json_response(
                {"message": "Guild already exists", "code": "CONFLICT"}, status=409
            )
        if body["id"] == "400":
            return web.json_response(
                {"error": "Invalid guild", "details": {"field": "name"}}, status=400
            )
        return web.json_response(body, status=201)

    async def sync_guild(request):
        body = await request.json()
        seen.append((request.method, request.path, None, body))
        return web.json_response({"synced": len(body["members"])})

    async def settings(request):
        return web.json_response({"bot_command_channels": [{"id": "5"}]})

    async def member(request):
        body = await request.json() if request.can_read_body else None
        seen.append((request.method, request.path, None, body))
        return web.json_response({"ok": True})

    async def broken(request):
        return web.Response(status=502, text="Bad Gateway")

    async def register(request):
        body = await request.json()
        seen.append((request.method, request.path, None, body))
        return web.json_response({"url": body["url"], "platform": "steam", "username": "p"})

    app = web.Application()
    app.router.add_get("/internal/health", health)
    app.router.add_post("/internal/guilds", create_guild)
    app.router.add_post("/internal/guilds/{guild_id}/sync", sync_guild)
    app.router.add_get("/internal/guilds/{guild_id}/settings", settings)
    app.router.add_post("/internal/guilds/{guild_id}/members", member)
    app.router.add_patch("/internal/guilds/{guild_id}/members/{user_id}", member)
    app.router.add_delete("/internal/guilds/{guild_id}/members/{user_id}", member)
    app.router.add_delete("/internal/guilds/{guild_id}", broken)
    app.router.add_post("/internal/trackers/register", register)
    app.router.add_post("/internal/trackers/add", register)
    return app


def _run(scenario):
    seen = []

    async def runner():
        async with TestServer(_app(seen)) as server:
            client = BackendClient(str(server.make_url("/")), API_KEY, timeout=5)
            try:
                return await scenario(client)
            finally:
                await client.close()

    return asyncio.run(runner()), seen


def _snapshot(guild_id):
    return GuildSnapshot(id=guild_id, name="League", owner_id=7, member_count=2)


def test_health_check_sends_bearer_token():
    result, seen = _run(lambda client: client.health_check())
    assert result["status"] == "ok"
    assert seen == [("GET", "/internal/health", "Bearer secret", None)]


def test_create_guild_posts_snapshot():
    result, seen = _run(lambda client: client.create_guild(_snapshot(123)))
    assert result == {"id": "123", "name": "League", "ownerId": "7", "memberCount": 2}
    assert seen[0][1] == "/internal/guilds"


def test_conflict_response_is_normalised():
    async def scenario(client):
        with pytest.raises(BackendError) as excinfo:
            await client.create_guild(_snapshot(409))
        return excinfo.value

    error, _ = _run(scenario)
    assert error.status_code == 409
    assert error.code == "CONFLICT"
    assert error.message == "Guild already exists"
    assert errors.is_conflict(error)


def test_bad_request_uses_error_field_and_details():
    async def scenario(client):
        with pytest.raises(BackendError) as excinfo:
            await client.create_guild(_snapshot(400))
        return excinfo.value

    error, _ = _run(scenario)
    assert error.to_dict() == {
        "message": "Invalid guild",
        "statusCode": 400,
        "code": None,
        "details": {"field": "name"},
    }
    assert errors.is_permanent(error)


def test_plain_text_error_body():
    async def scenario(client):
        with pytest.raises(BackendError) as excinfo:
            await client.remove_guild(5)
        return excinfo.value

    error, _ = _run(scenario)
    assert error.status_code == 502
    assert error.message == "Bad Gateway"
    assert errors.is_transient(error)


def test_sync_guild_sends_members_and_roles():
    members = [{"userId": "1", "username": "a", "roles": []}]
    roles = {"admin": [{"id": "9", "name": "Admins"}]}
    result, seen = _run(lambda client: client.sync_guild(_snapshot(77), members, roles))

    assert result == {"synced": 1}
    method, path, _, body = seen[0]
    assert (method, path) == ("POST", "/internal/guilds/77/sync")
    assert body["guild"]["id"] == "77"
    assert body["members"] == members
    assert body["roles"] == roles


def test_member_lifecycle_endpoints():
    async def scenario(client):
        await client.create_guild_member(1, {"userId": "2", "username": "a", "roles": []})
        await client.update_guild_member(1, 2, {"username": "a", "roles": ["3"]})
        await client.remove_guild_member(1, 2)
        return await client.get_guild_settings(1)

    settings, seen = _run(scenario)
    assert [(method, path) for method, path, _, _ in seen] == [
        ("POST", "/internal/guilds/1/members"),
        ("PATCH", "/internal/guilds/1/members/2"),
        ("DELETE", "/internal/guilds/1/members/2"),
    ]
    assert settings == {"bot_command_channels": [{"id": "5"}]}


def test_register_tracker_body():
    url = "https://rocketleague.tracker.network/rocket-league/profile/steam/p/overview"
    result, seen = _run(lambda client: client.register_tracker(42, url, {"username": "p"}))
    assert result["platform"] == "steam"
    assert seen[0][3] == {"userId": "42", "url": url, "userData": {"username": "p"}}


def test_add_tracker_posts_to_add_endpoint():
    url = "https://rocketleague.tracker.network/rocket-league/profile/epic/p/overview"
    result, seen = _run(lambda client: client.add_tracker(42, url))
    assert result["url"] == url
    assert seen[0][:2] == ("POST", "/internal/trackers/add")
    assert seen[0][3] == {"userId": "42", "url": url, "userData": None}


def test_unreachable_backend_maps_to_network_code():
    async def scenario():
        client = BackendClient("http://127.0.0.1:1", API_KEY, timeout=2)
        try:
            with pytest.raises(BackendError) as excinfo:
                await client.health_check()
        finally:
            await client.close()
        return excinfo.value

    error = asyncio.run(scenario())
    assert error.status_code is None
    assert error.code == "ECONNREFUSED"
    assert errors.is_transient(error)


def test_timeout_maps_to_etimedout():
    async def slow(request):
        await asyncio.sleep(1)
        return web.json_response({})

    async def scenario():
        app = web.Application()
        app.router.add_get("/internal/health", slow)
        async with TestServer(app) as server:
            client = BackendClient(str(server.make_url("/")), API_KEY, timeout=0.05)
            try:
                with pytest.raises(BackendError) as excinfo:
                    await client.health_check()
            finally:
                await client.close()
        return excinfo.value

    error = asyncio.run(scenario())
    assert error.code == "ETIMEDOUT"
