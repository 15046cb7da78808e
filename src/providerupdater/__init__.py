"""Turn a VPN provider's archive of OpenVPN profiles into a resolved server catalogue."""
from __future__ import annotations

from .models import Server
from .updater import Updater

__all__ = ["Server", "Updater"]
