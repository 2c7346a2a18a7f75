from formalis.api.v1.health.routes import router

__all__ = ["router"]
