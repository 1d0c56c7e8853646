from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.core.builders import BuilderRegistry, get_registry
from app.core.config import settings
from app.db.session import get_db

router = APIRouter(tags=["health"])


@router.get("/health")
def health(
    db: Session = Depends(get_db),
    registry: BuilderRegistry = Depends(get_registry),
):
    # Simple DB ping
    db.execute(text("SELECT 1"))
    return {
        "status": "ok",
        "open_builders": len(registry),
        "speech": "elevenlabs" if settings.elevenlabs_configured else "browser",
    }
