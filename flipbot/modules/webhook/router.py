"""
Webhook Router

Receives directional signals and hands them to the signal gate.

Author: Flipbot Team
"""

import hmac
from typing import Any, Optional
from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from flipbot.core.dependencies import get_signal_gate, get_webhook_passphrase
from flipbot.core.responses import error_response, success_response
from flipbot.domain.models.signal import SignalOutcome
from flipbot.modules.webhook.schemas import WebhookPayload
from flipbot.services.signal_gate import SignalGate
from flipbot.shared.exceptions import AppException, InvalidWebhookPassphraseError
from flipbot.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["Webhook"])

OUTCOME_MESSAGES = {
    SignalOutcome.APPLIED: "Signal applied",
    SignalOutcome.DUPLICATE: "Duplicate signal ignored",
    SignalOutcome.IGNORED: "Unrecognized signal ignored",
}


def _verify_passphrase(expected: Optional[str], provided: Optional[str]) -> None:
    if not expected:
        return
    if not provided or not hmac.compare_digest(expected.encode(), provided.encode()):
        raise InvalidWebhookPassphraseError()


@router.post("/webhook")
async def receive_signal(
    body: Any = Body(None),
    gate: SignalGate = Depends(get_signal_gate),
    passphrase: Optional[str] = Depends(get_webhook_passphrase)
):
    """
    Apply a directional signal.

    200 for applied, duplicate and unrecognized messages; an error envelope
    without upstream detail when the transition fails.
    """
    payload = WebhookPayload.from_body(body)
    _verify_passphrase(passphrase, payload.passphrase)

    logger.info(f"Signal received: {payload.message!r}")

    try:
        result = await gate.handle_signal(payload.message)
    except AppException:
        raise
    except Exception as e:
        logger.exception(f"Unexpected error while handling signal: {str(e)}")
        return JSONResponse(
            status_code=500,
            content=error_response(
                status_code=500,
                message="Signal handling failed",
                error_code="INTERNAL_SERVER_ERROR",
                error_message="Signal could not be applied"
            )
        )

    return success_response(
        status_code=200,
        message=OUTCOME_MESSAGES[result.outcome],
        data=result.to_dict()
    )


@router.get("/state")
async def get_state(gate: SignalGate = Depends(get_signal_gate)):
    """Last accepted signal and whether a transition is running."""
    return success_response(
        status_code=200,
        message="State retrieved",
        data=gate.snapshot()
    )
