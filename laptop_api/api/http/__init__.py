from laptop_api.api.http.health import router as health_router
from laptop_api.api.http.laptops import router as laptops_router

__all__ = [
    "health_router",
    "laptops_router"
]
