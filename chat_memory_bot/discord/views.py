from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable

import discord

from ..config import CONFIRMATION_TIMEOUT_SECONDS
from ..errors import StorageWriteError
from ..prompts.notices import notice
from .common import ConfirmationState, PendingConfirmation
from .embeds import build_clear_memory_embed

if TYPE_CHECKING:
    from .invocation import Invocation

logger = logging.getLogger("chat_memory_bot")

ConsentRecorder = Callable[..., Awaitable[str]]

TERMS_AGREE_ID = "terms:agree"
TERMS_DECLINE_ID = "terms:decline"


class TermsView(discord.ui.View):
    """Agree/Decline buttons under the terms prompt.

    Registered once as a persistent view, so presses on prompts sent before a
    restart are still answered.
    """

    def __init__(self, record_consent: ConsentRecorder) -> None:
        super().__init__(timeout=None)
        self._record_consent = record_consent
        self.agree.label = notice("terms_agree_label")
        self.decline.label = notice("terms_decline_label")

    @discord.ui.button(label="Agree", style=discord.ButtonStyle.success, custom_id=TERMS_AGREE_ID)
    async def agree(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:  # noqa: ARG002
        await self.answer(interaction, agreed=True)

    @discord.ui.button(label="Decline", style=discord.ButtonStyle.danger, custom_id=TERMS_DECLINE_ID)
    async def decline(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:  # noqa: ARG002
        await self.answer(interaction, agreed=False)

    async def answer(self, interaction: discord.Interaction, *, agreed: bool) -> None:
        text = await self._record_consent(
            user_id=str(interaction.user.id),
            username=interaction.user.name,
            guild_id=str(interaction.guild_id) if interaction.guild_id is not None else None,
            agreed=agreed,
        )
        await interaction.response.edit_message(content=text, embed=None, view=None)


class ClearMemoryView(discord.ui.View):
    """Confirm/Cancel prompt for wiping the issuer's chat history."""

    def __init__(
        self,
        *,
        invocation: Invocation,
        memory: Any,
        timeout: float = CONFIRMATION_TIMEOUT_SECONDS,
    ) -> None:
        super().__init__(timeout=timeout)
        self.invocation = invocation
        self.memory = memory
        self.pending = PendingConfirmation(user_id=invocation.user_id)
        self.confirm.label = notice("clear_confirm_label")
        self.cancel.label = notice("clear_cancel_label")

    def build_embed(self, kind: str) -> discord.Embed:
        guild = self.invocation.guild
        return build_clear_memory_embed(
            kind,
            user_label=self.invocation.user_label,
            avatar_url=self.invocation.avatar_url,
            guild_name=guild.name if guild is not None else None,
        )

    def _disable_all(self) -> None:
        for item in self.children:
            if isinstance(item, discord.ui.Button):
                item.disabled = True

    async def interaction_check(self, interaction: discord.Interaction) -> bool:
        if self.pending.accepts(str(interaction.user.id)):
            return True
        await interaction.response.send_message(notice("clear_not_yours"), ephemeral=True)
        return False

    @discord.ui.button(label="Yes", style=discord.ButtonStyle.success)
    async def confirm(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:  # noqa: ARG002
        await self.resolve_choice(interaction, ConfirmationState.CONFIRMED)

    @discord.ui.button(label="No", style=discord.ButtonStyle.danger)
    async def cancel(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:  # noqa: ARG002
        await self.resolve_choice(interaction, ConfirmationState.CANCELLED)

    async def resolve_choice(self, interaction: discord.Interaction, outcome: ConfirmationState) -> bool:
        if not self.pending.resolve(outcome):
            return False
        self._disable_all()
        self.stop()

        if outcome is ConfirmationState.CONFIRMED:
            try:
                await self.memory.purge_history(self.invocation.user_id)
                embed = self.build_embed("success")
            except StorageWriteError as exc:
                logger.error("Clearing history failed for user=%s: %s", self.invocation.user_id, exc)
                embed = self.build_embed("error")
        else:
            embed = self.build_embed("cancelled")

        await interaction.response.edit_message(embed=embed, view=None)
        return True

    async def on_timeout(self) -> None:
        if not self.pending.resolve(ConfirmationState.TIMED_OUT):
            return
        self._disable_all()
        try:
            await self.invocation.edit_reply(embed=self.build_embed("timeout"), view=None)
        except discord.HTTPException as exc:
            logger.warning("Could not mark clear-memory prompt as expired: %s", exc)

    async def on_error(
        self,
        interaction: discord.Interaction,
        error: Exception,
        item: discord.ui.Item[Any],
    ) -> None:
        logger.error("Clear-memory view failed on %s", item, exc_info=error)
