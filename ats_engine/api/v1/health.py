from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health", summary="Health Check", description="Check the health status of the scoring service.")
async def health_check(request: Request):
    channel = getattr(request.app.state, "scoring_channel", None)
    return {
        "status": "healthy",
        "scoring_channel": "closed" if channel is None or channel.closed else "open",
    }
