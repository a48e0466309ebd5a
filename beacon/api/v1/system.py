from fastapi import APIRouter

from beacon.configs import configs

router = APIRouter(tags=["system"])


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness check."""
    return {"status": "ok", "env": configs.Env}
