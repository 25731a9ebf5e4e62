"""Explicitly wired bot services, built once at startup."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from league_bot.clients.backend import BackendClient
from league_bot.commands import CommandRegistry
from league_bot.cooldowns import CooldownTracker
from league_bot.dispatch import DispatchPipeline
from league_bot.permissions import PermissionAuditLog, PermissionValidator

from .guilds import GuildService, GuildSyncCoordinator
from .members import MemberService
from .notifications import Notifier


@dataclass
class Services:
    backend: BackendClient
    cooldowns: CooldownTracker
    validator: PermissionValidator
    audit: PermissionAuditLog
    registry: CommandRegistry
    pipeline: DispatchPipeline
    notifier: Notifier
    guilds: GuildService
    sync: GuildSyncCoordinator
    members: MemberService


def build_services(config=None, *, backend: BackendClient | None = None) -> Services:
    """
    Wire every service from ``config`` (defaults to :class:`league_bot.config.Config`).

    ``backend`` may be injected to share or fake the HTTP client.
    """

    if config is None:
        from league_bot.config import Config as config

    backend = backend or BackendClient(
        config.backend.API_BASE_URL,
        config.backend.BOT_API_KEY,
        timeout=config.backend.REQUEST_TIMEOUT,
    )
    cooldowns = CooldownTracker()
    validator = PermissionValidator()
    audit = PermissionAuditLog(logging.getLogger("league_bot.audit"))
    registry = CommandRegistry()
    pipeline = DispatchPipeline(
        registry=registry,
        cooldowns=cooldowns,
        validator=validator,
        audit=audit,
        backend=backend,
        cooldown_for=config.commands.cooldown_for,
        allowed_user_id=config.core.ALLOWED_USER_ID,
    )
    notifier = Notifier()
    return Services(
        backend=backend,
        cooldowns=cooldowns,
        validator=validator,
        audit=audit,
        registry=registry,
        pipeline=pipeline,
        notifier=notifier,
        guilds=GuildService(backend, notifier, dashboard_url=config.core.DASHBOARD_URL),
        sync=GuildSyncCoordinator(backend),
        members=MemberService(backend),
    )


__all__ = [
    "GuildService",
    "GuildSyncCoordinator",
    "MemberService",
    "Notifier",
    "Services",
    "build_services",
]
