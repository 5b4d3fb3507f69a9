import logging

from fastapi import FastAPI

from washbook.api.v1.wizard import router as wizard_router
from washbook.core.config import settings

CONTEXT_KEYS = (
    "session_id",
    "worker_id",
    "service",
    "step",
    "fields",
    "missing",
    "booking_id",
    "booking_number",
    "payment_id",
    "payment_status",
    "platform_fee",
    "table",
    "status",
    "error_code",
    "error",
)


class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in CONTEXT_KEYS:
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

app = FastAPI(title="Car Wash Booking", version="1.0.0")

app.include_router(wizard_router, prefix="/api/v1/wizard", tags=["wizard"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
