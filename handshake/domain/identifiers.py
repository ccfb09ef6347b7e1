"""Conversions between Steam identifier encodings.

Everything here is pure and never raises: input that is not recognised comes back
unchanged and ``is_steam_id64`` decides whether it can be used as a graph key.
"""
from __future__ import annotations

import re
from typing import Optional

STEAM_ID64_BASE = 76561197960265728

_STEAM_ID64_RE = re.compile(r"^7656119\d{10}$")
_LEGACY_RE = re.compile(r"^STEAM_(\d+):([01]):(\d+)$")
_STEAM3_RE = re.compile(r"^\[U:1:(\d+)\]$")
_PROFILE_URL_RE = re.compile(r"steamcommunity\.com/(id|profiles)/([a-zA-Z0-9_-]+)")


def format_steam_id(raw: str) -> str:
    """Convert ``STEAM_X:Y:Z`` and ``[U:1:Z]`` forms to SteamID64.

    Anything else (already canonical, or a vanity handle) is returned as is.
    """
    value = raw.strip()

    legacy = _LEGACY_RE.match(value)
    if legacy:
        account_id = int(legacy.group(3)) * 2 + int(legacy.group(2))
        return str(account_id + STEAM_ID64_BASE)

    steam3 = _STEAM3_RE.match(value)
    if steam3:
        return str(int(steam3.group(1)) + STEAM_ID64_BASE)

    return value


def is_steam_id64(value: str) -> bool:
    return bool(_STEAM_ID64_RE.match(value))


def extract_steam_id_from_url(url: str) -> Optional[str]:
    """Return the ``/id/<handle>`` or ``/profiles/<id>`` segment of a profile URL."""
    match = _PROFILE_URL_RE.search(url)
    return match.group(2) if match else None


def normalize_identifier(raw: str) -> str:
    """Best-effort canonical form of user input, without any I/O."""
    value = raw.strip()
    if "steamcommunity.com" in value:
        extracted = extract_steam_id_from_url(value)
        if extracted:
            value = extracted
    return format_steam_id(value)
