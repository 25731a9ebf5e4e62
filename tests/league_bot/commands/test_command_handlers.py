import asyncio
from types import SimpleNamespace

from league_bot.clients.backend import BackendError
from league_bot.commands.handlers import add_tracker, dashboard, help as help_cmd, register
from league_bot.commands import CommandRegistry
from league_bot.models import CommandDescriptor

URL = "https://rocketleague.tracker.network/rocket-league/profile/steam/p/overview"


class FakeResponse:
    def __init__(self):
        self.sent = []
        self.deferred = None

    async def send_message(self, *args, **kwargs):
        self.sent.append(kwargs)

    async def defer(self, *, ephemeral=False):
        self.deferred = ephemeral


class FakeInteraction:
    def __init__(self, guild_id=42):
        self.guild_id = guild_id
        self.user = SimpleNamespace(id=7, name="player", global_name="Player", avatar=None)
        self.response = FakeResponse()
        self.edits = []

    async def edit_original_response(self, **kwargs):
        self.edits.append(kwargs)


def _bot(**services):
    return SimpleNamespace(services=SimpleNamespace(**services))


def test_help_lists_registered_commands():
    registry = CommandRegistry()
    registry.register(CommandDescriptor("help", "Show all available bot commands"))
    registry.register(CommandDescriptor("register", "Register your tracker"))
    cog = help_cmd.Help(_bot(registry=registry))
    interaction = FakeInteraction()

    asyncio.run(cog.help.callback(cog, interaction))

    reply = interaction.response.sent[0]
    assert reply["ephemeral"] is True
    assert [field.name for field in reply["embed"].fields] == ["/help", "/register"]


def test_config_links_dashboard_for_guild(monkeypatch):
    monkeypatch.setattr(dashboard.core, "DASHBOARD_URL", "https://dash.example")
    cog = dashboard.Config(_bot())
    interaction = FakeInteraction(guild_id=42)

    asyncio.run(cog.config.callback(cog, interaction))

    embed = interaction.response.sent[0]["embed"]
    assert "https://dash.example?guild=42" in embed.description


def test_config_without_dashboard(monkeypatch):
    monkeypatch.setattr(dashboard.core, "DASHBOARD_URL", None)
    cog = dashboard.Config(_bot())
    interaction = FakeInteraction()

    asyncio.run(cog.config.callback(cog, interaction))

    assert "not configured" in interaction.response.sent[0]["embed"].description


def test_register_success_edits_deferred_reply():
    calls = []

    class Backend:
        async def register_tracker(self, user_id, url, user_data):
            calls.append((user_id, url, user_data))
            return {"url": url, "platform": "steam", "username": "p", "scrapingStatus": "PENDING"}

    cog = register.Register(_bot(backend=Backend()))
    interaction = FakeInteraction()

    asyncio.run(cog.register.callback(cog, interaction, URL))

    assert interaction.response.deferred is True
    assert calls == [(7, URL, {"username": "player", "globalName": "Player", "avatar": None})]
    embed = interaction.edits[0]["embed"]
    assert embed.title.startswith("✅")
    assert {field.name: field.value for field in embed.fields}["Platform"] == "steam"


def test_register_failure_shows_backend_message():
    class Backend:
        async def register_tracker(self, user_id, url, user_data):
            raise BackendError("Invalid tracker URL", status_code=400)

    cog = register.Register(_bot(backend=Backend()))
    interaction = FakeInteraction()

    asyncio.run(cog.register.callback(cog, interaction, "https://example.com"))

    embed = interaction.edits[0]["embed"]
    assert embed.title.startswith("❌")
    assert embed.description == "Invalid tracker URL"


def test_add_tracker_success_edits_deferred_reply():
    calls = []

    class Backend:
        async def add_tracker(self, user_id, url, user_data):
            calls.append((user_id, url, user_data))
            return {"url": url, "platform": "epic", "username": "p"}

    cog = add_tracker.AddTracker(_bot(backend=Backend()))
    interaction = FakeInteraction()

    asyncio.run(cog.add_tracker.callback(cog, interaction, URL))

    assert interaction.response.deferred is True
    assert calls == [(7, URL, {"username": "player", "globalName": "Player", "avatar": None})]
    embed = interaction.edits[0]["embed"]
    assert embed.title == "✅ Tracker Added Successfully"
    fields = {field.name: field.value for field in embed.fields}
    assert fields["Platform"] == "epic"
    assert fields["Status"] == "PENDING"


def test_add_tracker_failure_shows_backend_message_and_limit_tip():
    class Backend:
        async def add_tracker(self, user_id, url, user_data):
            raise BackendError("You already have 4 trackers", status_code=400)

    cog = add_tracker.AddTracker(_bot(backend=Backend()))
    interaction = FakeInteraction()

    asyncio.run(cog.add_tracker.callback(cog, interaction, URL))

    embed = interaction.edits[0]["embed"]
    assert embed.title == "❌ Add Tracker Failed"
    assert embed.description == "You already have 4 trackers"
    assert "up to 4 trackers" in embed.fields[0].value


def test_add_tracker_failure_without_message_uses_fallback():
    class Backend:
        async def add_tracker(self, user_id, url, user_data):
            raise BackendError("", code="ECONNREFUSED")

    cog = add_tracker.AddTracker(_bot(backend=Backend()))
    interaction = FakeInteraction()

    asyncio.run(cog.add_tracker.callback(cog, interaction, URL))

    assert interaction.edits[0]["embed"].description.startswith(
        "An error occurred while adding the tracker"
    )
