from fastapi import FastAPI
import logging

from backend.app.logging_config import setup_logging
from backend.app.wizard import router as wizard_router

setup_logging()

app = FastAPI(
    title="Site Starter Wizard",
    response_model_by_alias=False,
)

app.include_router(wizard_router)

logger = logging.getLogger("starter.core")
logger.info("Starter wizard backend starting")


@app.get("/api/health")
def health() -> dict[str, str]:
    return {"status": "ok", "service": "starter-wizard"}
