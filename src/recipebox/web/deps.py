from typing import Annotated, cast

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from recipebox.app import App
from recipebox.core.modules.auth.models import AuthToken
from recipebox.core.modules.user.models import Identity
from recipebox.errors import AuthError

bearer_scheme = HTTPBearer(auto_error=False)


async def get_app(request: Request) -> App:
    return cast(App, request.app.state.app)


async def require_store(app: Annotated[App, Depends(get_app)]) -> None:
    """Fail with 503 before any other work when the store is down."""
    app.ensure_store_ready()


async def get_current_identity(
    app: Annotated[App, Depends(get_app)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)] = None,
) -> Identity:
    """Resolve the Authorization: Bearer header to a verified identity."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthError("Unauthorized")
    return app.verify_token(AuthToken(credentials.credentials))


# Type aliases for dependencies
AppDep = Annotated[App, Depends(get_app)]
IdentityDep = Annotated[Identity, Depends(get_current_identity)]
