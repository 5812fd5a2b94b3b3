"""Discord bot with per-user Gemini chat memory and a terms-consent gate."""

__version__ = "0.1.0"
