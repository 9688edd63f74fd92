from recipebox.web.routers.auth import router as auth_router
from recipebox.web.routers.recipes import anonymous_router as anonymous_recipes_router
from recipebox.web.routers.recipes import router as recipes_router

__all__ = [
    "anonymous_recipes_router",
    "auth_router",
    "recipes_router",
]
