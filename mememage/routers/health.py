from fastapi import APIRouter

from mememage.core import envelope

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check():
    return envelope.ok("MemEmage API is running")
