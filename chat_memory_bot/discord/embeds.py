"""Embed builders for the terms prompt, failure notices, help and history clearing."""

from __future__ import annotations

from datetime import datetime

import discord

from ..prompts.notices import notice

COLOR_INFO = 0x0099FF
COLOR_SUCCESS = 0x00FF00
COLOR_ERROR = 0xFF0000
COLOR_CANCELLED = 0xFFA500
COLOR_TIMEOUT = 0x808080


def _footer_text(guild_name: str | None, now: datetime | None = None) -> str:
    moment = now or datetime.now()
    clock = moment.strftime("%I:%M %p").lstrip("0")
    return f"{guild_name or 'Server'} • Today at {clock}"


def build_terms_embed() -> discord.Embed:
    embed = discord.Embed(
        title=notice("terms_title"),
        description=notice("terms_body"),
        color=COLOR_INFO,
    )
    embed.set_footer(text=notice("terms_footer"))
    return embed


def build_failure_embed(text: str | None = None) -> discord.Embed:
    return discord.Embed(description=text or notice("command_failed"), color=COLOR_ERROR)


def build_help_embed(
    prefix: str,
    *,
    user_label: str,
    avatar_url: str | None = None,
    guild_name: str | None = None,
) -> discord.Embed:
    embed = discord.Embed(
        title=notice("help_title"),
        description=notice("help_body"),
        color=COLOR_INFO,
    )
    embed.set_author(name=user_label, icon_url=avatar_url or None)
    embed.add_field(name="🤖 Chat", value=notice("help_chat", prefix=prefix), inline=False)
    embed.add_field(
        name="🗑️ Clear Memory (cm)",
        value=notice("help_clear_memory", prefix=prefix),
        inline=False,
    )
    embed.add_field(name="❓ Help", value=notice("help_help", prefix=prefix), inline=False)
    embed.set_footer(text=_footer_text(guild_name))
    return embed


def build_clear_memory_embed(
    kind: str,
    *,
    user_label: str,
    avatar_url: str | None = None,
    guild_name: str | None = None,
) -> discord.Embed:
    """Build one of the clear-memory embeds: confirm, success, error, cancelled or timeout."""
    colors = {
        "confirm": COLOR_INFO,
        "success": COLOR_SUCCESS,
        "error": COLOR_ERROR,
        "cancelled": COLOR_CANCELLED,
        "timeout": COLOR_TIMEOUT,
    }
    if kind not in colors:
        raise ValueError(f"Unknown clear-memory embed kind: {kind}")
    embed = discord.Embed(
        title=notice(f"clear_{kind}_title"),
        description=notice(f"clear_{kind}_body"),
        color=colors[kind],
    )
    embed.set_author(name=f"{user_label} 🛡️", icon_url=avatar_url or None)
    embed.set_footer(text=_footer_text(guild_name))
    return embed
