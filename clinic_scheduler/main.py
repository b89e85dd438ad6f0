import logging

from fastapi import FastAPI

from clinic_scheduler.api.v1.availability import router as availability_router
from clinic_scheduler.api.v1.capacity import router as capacity_router
from clinic_scheduler.api.v1.requests import router as requests_router
from clinic_scheduler.core.config import settings


class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in ("date", "slot_id", "request_id", "status", "count", "path", "reason", "error"):
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

app = FastAPI(title="Clinic Session Scheduler", version="1.0.0")

app.include_router(availability_router, prefix="/api/v1", tags=["availability"])
app.include_router(requests_router, prefix="/api/v1", tags=["requests"])
app.include_router(capacity_router, prefix="/api/v1", tags=["capacity"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
