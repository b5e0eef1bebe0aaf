"""
api/routes/users.py -- Import and management of locally saved users.

Routes (in registration order to avoid FastAPI path capture conflicts):
  POST   /users/import/{user_id}         -- copy a ReqRes user into the local store
  GET    /users/saved                    -- paginated list with post counts
  GET    /users/saved/{user_id}          -- one user with their posts
  DELETE /users/saved/{user_id}?adminId= -- delete user and posts (admin only)
  PATCH  /users/saved/{user_id}          -- partial update of profile fields
  PATCH  /users/saved/{user_id}/role     -- change role (no self-demotion)

Authorization is by the acting user's id passed in the request (adminId).
There is no session or token check on these routes.
"""

from fastapi import APIRouter, Query, Request

from api.models import ApiResponse, RoleUpdate, UserDetail, UserPage, UserResponse, UserUpdate
from users import service

router = APIRouter(prefix="/users")


@router.post("/import/{user_id}", response_model=ApiResponse[UserResponse], status_code=201)
def import_user(request: Request, user_id: int) -> ApiResponse[UserResponse]:
    """Fetch a user from ReqRes by id and save it locally.

    Provider user 1 is saved as ADMIN, every other user as USER.
    409 if already saved, 404 if ReqRes does not know the id.
    """
    user = service.import_user(request.app.state.store, request.app.state.settings, user_id)
    return ApiResponse[UserResponse].ok(UserResponse.from_user(user), code=201)


@router.get("/saved", response_model=ApiResponse[UserPage])
def list_saved_users(
    request: Request,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1),
) -> ApiResponse[UserPage]:
    """Return locally saved users, newest first."""
    result = service.list_saved_users(request.app.state.store, page, limit)
    return ApiResponse[UserPage].ok(UserPage.from_page(result))


@router.get("/saved/{user_id}", response_model=ApiResponse[UserDetail])
def get_saved_user(request: Request, user_id: int) -> ApiResponse[UserDetail]:
    saved = service.get_saved_user(request.app.state.store, user_id)
    return ApiResponse[UserDetail].ok(UserDetail.from_saved(saved))


@router.delete("/saved/{user_id}", response_model=ApiResponse[UserResponse])
def delete_saved_user(
    request: Request,
    user_id: int,
    admin_id: int = Query(alias="adminId"),
) -> ApiResponse[UserResponse]:
    """Delete a saved user and all of their posts. The acting user must be an ADMIN."""
    deleted = service.delete_saved_user(request.app.state.store, user_id, admin_id)
    return ApiResponse[UserResponse].ok(UserResponse.from_user(deleted))


@router.patch("/saved/{user_id}", response_model=ApiResponse[UserResponse])
def update_saved_user(request: Request, user_id: int, body: UserUpdate) -> ApiResponse[UserResponse]:
    """Update only the fields present in the body. 409 if the new email is taken."""
    fields = body.model_dump(exclude_unset=True, exclude_none=True)
    updated = service.update_saved_user(request.app.state.store, user_id, fields)
    return ApiResponse[UserResponse].ok(UserResponse.from_user(updated))


@router.patch("/saved/{user_id}/role", response_model=ApiResponse[UserResponse])
def update_user_role(request: Request, user_id: int, body: RoleUpdate) -> ApiResponse[UserResponse]:
    """Set a user's role. An admin cannot demote themself."""
    updated = service.update_user_role(request.app.state.store, user_id, body.role.value, body.admin_id)
    return ApiResponse[UserResponse].ok(UserResponse.from_user(updated))
