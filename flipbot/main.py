"""
FastAPI main application.

Entry point for the Flipbot webhook service.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from flipbot.config import settings
from flipbot.config.database import close_mongodb_connection, connect_to_mongodb, get_database
from flipbot.config.settings import get_settings
from flipbot.core.responses import error_response
from flipbot.integrations.exchanges.binance_futures import BinanceFuturesClient
from flipbot.repositories.signal_state_repository import SignalStateRepository
from flipbot.services.signal_gate import SignalGate
from flipbot.services.transition_engine import PositionTransitionEngine
from flipbot.shared.exceptions import AppException
from flipbot.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Connects MongoDB, builds the exchange client, transition engine and
    signal gate, and seeds the gate from the persisted state before the
    first request is accepted.
    """
    current_settings = get_settings()
    setup_logging(
        level=current_settings.LOG_LEVEL,
        format_type=current_settings.LOG_FORMAT,
        log_file=current_settings.LOG_FILE_PATH
    )

    logger.info("Starting application...")

    client = None
    try:
        await connect_to_mongodb()

        client = BinanceFuturesClient(
            api_key=current_settings.BINANCE_API_KEY,
            api_secret=current_settings.BINANCE_API_SECRET,
            testnet=current_settings.BINANCE_TESTNET,
            quote_asset=current_settings.QUOTE_ASSET,
            timeout_seconds=current_settings.EXCHANGE_TIMEOUT_SECONDS,
            recv_window=current_settings.BINANCE_RECV_WINDOW
        )

        engine = PositionTransitionEngine(
            client,
            symbol=current_settings.SYMBOL,
            leverage=current_settings.LEVERAGE,
            utilization_fraction=current_settings.UTILIZATION_FRACTION,
            stop_fraction=current_settings.STOP_LOSS_FRACTION,
            target_fraction=current_settings.TAKE_PROFIT_FRACTION,
            price_precision=current_settings.PRICE_PRECISION
        )

        repository = SignalStateRepository(
            get_database(),
            collection_name=current_settings.STATE_COLLECTION,
            document_id=current_settings.STATE_DOCUMENT_ID
        )

        gate = SignalGate(
            repository,
            engine,
            buy_message=current_settings.BUY_SIGNAL_MESSAGE,
            sell_message=current_settings.SELL_SIGNAL_MESSAGE
        )
        await gate.load()

        app.state.exchange_client = client
        app.state.signal_gate = gate
        app.state.webhook_passphrase = current_settings.WEBHOOK_PASSPHRASE

        logger.info(
            f"Application started: symbol={current_settings.SYMBOL}, "
            f"leverage={current_settings.LEVERAGE}x, lastSignal={gate.snapshot()['last_signal']}"
        )
    except Exception as e:
        logger.error(f"Failed to start application: {str(e)}")
        if client is not None:
            await client.close()
        await close_mongodb_connection()
        raise

    yield

    logger.info("Shutting down application...")

    await client.close()
    await close_mongodb_connection()

    logger.info("Application shut down successfully")


app = FastAPI(
    title=settings.APP_NAME if settings else "Flipbot",
    version=settings.APP_VERSION if settings else "1.0.0",
    description="Flips a single futures position on SuperTrend webhook signals.",
    lifespan=lifespan,
)


@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException):
    """Render application errors in the standard envelope without upstream detail."""
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.url.path}: {exc.message}")
        detail = "Signal could not be applied"
    else:
        logger.warning(f"{exc.code} on {request.url.path}: {exc.message}")
        detail = exc.message

    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(
            status_code=exc.status_code,
            message="Request failed",
            error_code=exc.code,
            error_message=detail
        )
    )


from flipbot.modules.webhook.router import router as webhook_router

app.include_router(webhook_router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "app": settings.APP_NAME if settings else "Flipbot",
        "status": "running"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": settings.APP_NAME if settings else "Flipbot",
        "version": settings.APP_VERSION if settings else "1.0.0",
        "symbol": settings.SYMBOL if settings else None
    }


def run() -> None:
    """Console entry point."""
    import uvicorn

    current_settings = get_settings()
    uvicorn.run(
        "flipbot.main:app",
        host=current_settings.HOST,
        port=current_settings.PORT,
        reload=current_settings.DEBUG
    )


if __name__ == "__main__":
    run()
