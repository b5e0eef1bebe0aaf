"""
api/routes/posts.py -- Post CRUD routes.

Routes:
  POST   /posts                     -- create a post for a saved user
  GET    /posts?page&limit&userId   -- paginated list, optionally by author
  GET    /posts/{post_id}           -- one post with its full author
  PUT    /posts/{post_id}           -- partial update (title/content)
  DELETE /posts/{post_id}           -- delete, returns the removed post
"""

from typing import Optional

from fastapi import APIRouter, Query, Request

from api.models import ApiResponse, PostCreate, PostDetail, PostPage, PostResponse, PostUpdate, PostWithAuthor
from posts import service

router = APIRouter(prefix="/posts")


@router.post("", response_model=ApiResponse[PostWithAuthor], status_code=201)
def create_post(request: Request, body: PostCreate) -> ApiResponse[PostWithAuthor]:
    """Create a post. 404 if authorUserId is not a locally saved user."""
    post = service.create_post(request.app.state.store, body.title, body.content, body.author_user_id)
    return ApiResponse[PostWithAuthor].ok(PostWithAuthor.from_post(post), code=201)


@router.get("", response_model=ApiResponse[PostPage])
def list_posts(
    request: Request,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1),
    user_id: Optional[int] = Query(default=None, alias="userId"),
) -> ApiResponse[PostPage]:
    """Return posts newest first. userId narrows the list to one author."""
    # userId=0 is treated as "no filter"; no user can hold id 0.
    result = service.list_posts(request.app.state.store, page, limit, author_user_id=user_id or None)
    return ApiResponse[PostPage].ok(PostPage.from_page(result))


@router.get("/{post_id}", response_model=ApiResponse[PostDetail])
def get_post(request: Request, post_id: int) -> ApiResponse[PostDetail]:
    post = service.get_post(request.app.state.store, post_id)
    return ApiResponse[PostDetail].ok(PostDetail.from_post(post))


@router.put("/{post_id}", response_model=ApiResponse[PostResponse])
def update_post(request: Request, post_id: int, body: PostUpdate) -> ApiResponse[PostResponse]:
    fields = body.model_dump(exclude_unset=True, exclude_none=True)
    post = service.update_post(request.app.state.store, post_id, fields)
    return ApiResponse[PostResponse].ok(PostResponse.from_post(post))


@router.delete("/{post_id}", response_model=ApiResponse[PostResponse])
def remove_post(request: Request, post_id: int) -> ApiResponse[PostResponse]:
    post = service.remove_post(request.app.state.store, post_id)
    return ApiResponse[PostResponse].ok(PostResponse.from_post(post))
