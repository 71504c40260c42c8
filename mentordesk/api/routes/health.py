from fastapi import APIRouter

from mentordesk.core.config import settings

router = APIRouter()


@router.get("/health")
async def health():
    return {
        "status": "ok",
        "storage": settings.storage_backend,
        "notifications": settings.notification_backend,
    }
