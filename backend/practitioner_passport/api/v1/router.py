from fastapi import APIRouter
from practitioner_passport.api.v1.endpoints import verifications, mentor_assignments

api_router = APIRouter()

api_router.include_router(verifications.router)
api_router.include_router(mentor_assignments.router)


@api_router.get("/health", tags=["Health"])
async def health_check():
    """Simple health check endpoint"""
    return {"status": "healthy", "service": "practitioner-passport"}
