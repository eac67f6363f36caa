from fastapi import Depends, FastAPI
from sqlalchemy.orm import Session

from wabot.config import settings
from wabot.database import get_db, init_db
from wabot.logging_config import get_logger, setup_logging
from wabot.models import User
from wabot.routers import webhook

setup_logging(settings.log_level)

logger = get_logger("main")

app = FastAPI(
    title="WhatsApp Assistant Bot",
    description="Routes inbound WhatsApp messages to commands, onboarding or the assistant",
    version="0.1.0",
    debug=settings.debug,
)

app.include_router(webhook.router)


@app.on_event("startup")
def create_tables() -> None:
    init_db()
    logger.info("Database tables ready")


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/db-check")
def db_check(db: Session = Depends(get_db)):
    users_count = db.query(User).count()
    return {"status": "ok", "users": users_count}
