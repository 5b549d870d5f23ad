from fastapi import APIRouter

from gymdesk import config

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "message": f"{config.APP_NAME} is running"}
