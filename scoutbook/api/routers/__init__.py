"""API routers for different resource types."""

from scoutbook.api.routers.observation import router as observation_router

__all__ = ["observation_router"]
