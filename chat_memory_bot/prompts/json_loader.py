"""Operator overrides for user-facing texts, read from ``prompts/data/<name>.json``."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Mapping

logger = logging.getLogger("chat_memory_bot.prompts")

_CACHE: dict[Path, tuple[int | None, dict[str, str]]] = {}


def _data_dir() -> Path:
    return Path(__file__).with_name("data")


def _mtime_ns(path: Path) -> int | None:
    try:
        return path.stat().st_mtime_ns
    except OSError:
        return None


def _read_overrides(path: Path, defaults: Mapping[str, str]) -> dict[str, str]:
    try:
        payload = json.loads(path.read_text(encoding="utf-8-sig"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        logger.warning("Failed to parse %s (%s). Using default texts.", path, exc)
        return {}

    if not isinstance(payload, dict):
        logger.warning("%s must hold a JSON object of texts (using defaults)", path)
        return {}

    overrides: dict[str, str] = {}
    for key, value in payload.items():
        if key not in defaults:
            logger.warning("Ignoring unknown text key %r in %s", key, path)
        elif not isinstance(value, str):
            logger.warning("Ignoring non-string value for %r in %s", key, path)
        else:
            overrides[key] = value
    return overrides


def load_texts(filename: str, defaults: Mapping[str, str], data_dir: Path | None = None) -> dict[str, str]:
    """Return ``defaults`` with any string overrides from the JSON file applied.

    The file is re-read only when its mtime changes. A missing file is normal
    and yields the defaults.
    """
    path = (data_dir or _data_dir()) / filename
    mtime_ns = _mtime_ns(path)

    cached = _CACHE.get(path)
    if cached is not None and cached[0] == mtime_ns:
        return dict(cached[1])

    texts = dict(defaults)
    if mtime_ns is not None:
        texts.update(_read_overrides(path, defaults))
        logger.info("Loaded text overrides from %s", path)

    _CACHE[path] = (mtime_ns, texts)
    return dict(texts)
