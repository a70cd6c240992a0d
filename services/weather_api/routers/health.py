"""Health check endpoint."""

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def health_check(request: Request) -> dict:
    settings = request.app.state.settings
    return {
        "success": True,
        "data": {
            "status": "healthy" if not settings.missing_required() else "misconfigured",
            "version": settings.app_version,
        },
        "requestId": request.state.request_id,
    }
