from fastapi import APIRouter
from pydantic import BaseModel, Field

from recipebox.core.modules.auth.models import AuthResult
from recipebox.core.modules.user.models import Identity
from recipebox.web.deps import AppDep, IdentityDep
from recipebox.web.openapi import ErrorResponse

router = APIRouter(prefix="/auth", tags=["auth"])


class CredentialsRequest(BaseModel):
    """Username/password pair. Missing values are reported as 400, not 422."""

    username: str | None = Field(None, description="Username (at least 3 characters for sign-up)")
    password: str | None = Field(None, description="Password (at least 6 characters for sign-up)")

    model_config = {"json_schema_extra": {"examples": [{"username": "alice", "password": "secret1"}]}}


@router.post(
    "/signup",
    summary="Create account",
    description="Register a new user and receive a bearer token valid for 7 days.",
    operation_id="signup",
    status_code=201,
    responses={
        201: {"description": "Account created"},
        400: {"model": ErrorResponse, "description": "Missing or too short username/password"},
        409: {"model": ErrorResponse, "description": "Username already taken"},
        503: {"model": ErrorResponse, "description": "Database unavailable"},
    },
)
async def signup(request: CredentialsRequest, app: AppDep) -> AuthResult:
    return await app.signup(request.username, request.password)


@router.post(
    "/login",
    summary="Authenticate user",
    description="Authenticate with username and password to receive a fresh bearer token.",
    operation_id="login",
    responses={
        200: {"description": "Successfully authenticated"},
        400: {"model": ErrorResponse, "description": "Missing username or password"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
        503: {"model": ErrorResponse, "description": "Database unavailable"},
    },
)
async def login(request: CredentialsRequest, app: AppDep) -> AuthResult:
    return await app.login(request.username, request.password)


@router.get(
    "/me",
    summary="Get current user",
    description="Return the identity encoded in the bearer token.",
    operation_id="getCurrentUser",
    responses={
        200: {"description": "Current user"},
        401: {"model": ErrorResponse, "description": "Missing, invalid or expired token"},
    },
)
async def me(identity: IdentityDep) -> Identity:
    return identity
