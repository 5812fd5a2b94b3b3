"""Consent-gated dispatch of commands coming from slash interactions and prefixed messages."""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

from ..errors import HandlerError, StorageWriteError
from ..memory.models import ConsentStatus
from ..prompts.notices import notice
from .embeds import build_failure_embed, build_terms_embed
from .views import TermsView

if TYPE_CHECKING:
    from .invocation import Invocation
    from .registry import CommandContext, CommandRegistry

logger = logging.getLogger("chat_memory_bot")


class DispatchOutcome(str, Enum):
    UNKNOWN = "unknown"
    TERMS_REQUIRED = "terms_required"
    TARGET_REJECTED = "target_rejected"
    EXECUTED = "executed"
    FAILED = "failed"


class CommandGate:
    def __init__(self, registry: CommandRegistry, context: CommandContext) -> None:
        self.registry = registry
        self.context = context

    @property
    def memory(self):
        return self.context.memory

    async def dispatch(self, invocation: Invocation) -> DispatchOutcome:
        command = self.registry.resolve(invocation.command_name)
        if command is None:
            logger.debug("Ignoring unknown command %r from user=%s", invocation.command_name, invocation.user_id)
            return DispatchOutcome.UNKNOWN

        if not await self.memory.has_agreed(invocation.user_id):
            await self.send_terms(invocation)
            return DispatchOutcome.TERMS_REQUIRED

        for target in invocation.target_users:
            if not await self.memory.has_agreed(target.user_id):
                await invocation.reply(notice("target_not_agreed", username=target.label), ephemeral=True)
                return DispatchOutcome.TARGET_REJECTED

        logger.info("[cmd] %s kind=%s user=%s", command.name, invocation.kind, invocation.user_id)
        try:
            await command.execute(invocation, self.context)
        except Exception as exc:
            failure = HandlerError(command.name, exc)
            logger.error("%s", failure, exc_info=exc)
            await self._send_failure(invocation)
            return DispatchOutcome.FAILED
        return DispatchOutcome.EXECUTED

    async def _send_failure(self, invocation: Invocation) -> None:
        try:
            await invocation.reply(embed=build_failure_embed())
        except Exception as exc:
            logger.warning("Could not deliver failure notice to user=%s: %s", invocation.user_id, exc)

    async def send_terms(self, invocation: Invocation) -> None:
        await invocation.reply(embed=build_terms_embed(), view=TermsView(self.record_consent))

    async def record_consent(
        self,
        *,
        user_id: str,
        username: str | None,
        guild_id: str | None,
        agreed: bool,
    ) -> str:
        status = ConsentStatus.AGREED if agreed else ConsentStatus.DECLINED
        try:
            await self.memory.set_consent_status(user_id, status, username=username)
            if agreed and guild_id:
                await self.memory.record_user_guild(user_id, guild_id)
        except StorageWriteError as exc:
            logger.error("Saving consent=%s for user=%s failed: %s", status.value, user_id, exc)
        logger.info("[consent] user=%s status=%s guild=%s", user_id, status.value, guild_id or "dm")
        return notice("terms_agreed" if agreed else "terms_declined")
