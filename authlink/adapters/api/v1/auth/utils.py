from __future__ import annotations

"""Utility functions shared by the authentication routes."""

from typing import Optional, Tuple

from fastapi import Request


def client_context(request: Request) -> Tuple[Optional[str], Optional[str]]:
    """Return ``(ip_address, user_agent)`` for audit records.

    Either value is ``None`` when the request does not carry it.
    """
    ip_address = request.client.host if request.client else None
    user_agent = request.headers.get("user-agent")
    return ip_address, user_agent
