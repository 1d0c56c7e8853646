from fastapi import APIRouter

router = APIRouter()

@router.get("/")
def root():
    return {
        "name": "Voice Form Builder",
        "status": "ok",
        "docs": "/docs",
        "health": "/health",
    }
