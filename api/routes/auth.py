"""
api/routes/auth.py -- Login proxy endpoint.

Routes:
  POST /auth/login   -- authenticate through ReqRes, return token + identity

Security:
  POST /auth/login is rate-limited to 10 requests/minute per IP.
  The identity provider's error text is never returned; a rejected login
  always answers 401 with the same fixed message.
  Cache-Control: no-store on login responses (they carry a token).
"""

from fastapi import APIRouter, Request, Response

from api.limiter import LOGIN_LIMIT, limiter
from api.models import ApiResponse, LoginRequest, LoginResponse
from auth.login import login as reconcile_login

router = APIRouter()


@limiter.limit(LOGIN_LIMIT)  # must stay ABOVE @router to preserve FastAPI introspection
@router.post("/auth/login", response_model=ApiResponse[LoginResponse])
def login(request: Request, response: Response, body: LoginRequest) -> ApiResponse[LoginResponse]:
    """Authenticate with the identity provider and resolve who logged in.

    The returned user comes from the local store when the email is saved
    there (keeping its role), otherwise from the provider's user directory,
    otherwise a placeholder built from the email.
    """
    result = reconcile_login(
        body.email,
        body.password,
        request.app.state.store,
        request.app.state.settings,
    )
    response.headers["Cache-Control"] = "no-store"
    return ApiResponse[LoginResponse].ok(LoginResponse.from_result(result))
