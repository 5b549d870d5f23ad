from fastapi import APIRouter

router = APIRouter(prefix="/api/member")

from . import memberships

router.include_router(memberships.router)
