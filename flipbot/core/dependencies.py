"""
FastAPI dependencies.

Components are built once in the application lifespan and stored on
``app.state``; these helpers hand them to route handlers.
"""

from typing import Optional
from fastapi import HTTPException, Request

from flipbot.services.signal_gate import SignalGate


def get_signal_gate(request: Request) -> SignalGate:
    """
    Get the process-wide signal gate.

    Raises:
        HTTPException: 503 while the application is still starting
    """
    gate = getattr(request.app.state, "signal_gate", None)
    if gate is None:
        raise HTTPException(status_code=503, detail="Signal gate not initialized")
    return gate


def get_webhook_passphrase(request: Request) -> Optional[str]:
    """Configured webhook shared secret, or None when not required."""
    return getattr(request.app.state, "webhook_passphrase", None)
