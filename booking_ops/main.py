import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from datetime import timedelta

from fastapi import FastAPI

from booking_ops.api.v1.bookings import router as bookings_router
from booking_ops.api.v1.cancellations import router as cancellations_router
from booking_ops.api.v1.reschedules import router as reschedules_router
from booking_ops.api.v1.schedule import router as schedule_router
from booking_ops.api.webhooks import router as webhooks_router
from booking_ops.core.config import settings
from booking_ops.wiring.dependencies import get_booking_workflow

class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in ("booking_id", "status", "previous", "payment_token", "reason", "request_id", "error"):
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


handler = logging.StreamHandler()
handler.setFormatter(ContextFormatter("%(levelname)s:%(name)s:%(message)s"))

root = logging.getLogger()
root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
root.handlers.clear()
root.addHandler(handler)

logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


async def reap_stale_drafts_forever(interval_seconds: float, ttl: timedelta) -> None:
    workflow = get_booking_workflow()
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await asyncio.to_thread(workflow.reap_stale_drafts, ttl)
        except Exception as e:
            logger.exception("Stale draft sweep failed", extra={"error": str(e)})


@asynccontextmanager
async def lifespan(app: FastAPI):
    reaper = None
    if settings.REAPER_ENABLED:
        reaper = asyncio.create_task(
            reap_stale_drafts_forever(settings.REAPER_INTERVAL_SECONDS, timedelta(minutes=settings.DRAFT_TTL_MINUTES))
        )
        logger.info("Stale draft sweep scheduled every %ss", settings.REAPER_INTERVAL_SECONDS)
    yield
    if reaper:
        reaper.cancel()
        with suppress(asyncio.CancelledError):
            await reaper


app = FastAPI(title="Booking Operations", version="1.0.0", lifespan=lifespan)

app.include_router(webhooks_router, tags=["webhooks"])
app.include_router(bookings_router, prefix="/api/v1", tags=["bookings"])
app.include_router(schedule_router, prefix="/api/v1", tags=["schedule"])
app.include_router(cancellations_router, prefix="/api/v1", tags=["cancellations"])
app.include_router(reschedules_router, prefix="/api/v1", tags=["reschedules"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
