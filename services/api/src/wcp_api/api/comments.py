"""评论接口。"""

from uuid import UUID

from fastapi import APIRouter, Depends, Path, Request, status
from sqlalchemy.orm import Session

from wcp_api.api.payloads import comment_payload, thread_payload
from wcp_api.db.session import get_db
from wcp_api.dependencies import WorkspaceContext, require_workspace_member
from wcp_api.schemas.comment import CommentCreateRequest, CommentData, CommentThreadData, CommentUpdateRequest
from wcp_api.schemas.common import ErrorResponse, PageResponse, SuccessResponse
from wcp_api.services.comments import create_comment, delete_comment, list_comment_threads, update_comment
from wcp_api.services.lifecycle import get_active_article
from wcp_api.utils.pagination import PageParams, get_page_params
from wcp_api.utils.response import success

router = APIRouter(prefix="/workspaces/{workspace_id}/articles/{article_id}/comments", tags=["comments"])


@router.post(
    "",
    summary="发表评论",
    description="任一成员可评论或回复，文章作者会收到通知（自己评论除外）。",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessResponse[CommentData],
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def create_comment_route(
    payload: CommentCreateRequest,
    request: Request,
    article_id: UUID = Path(description="文章 ID。"),
    ctx: WorkspaceContext = Depends(require_workspace_member()),
    db: Session = Depends(get_db),
):
    comment = create_comment(
        db,
        access=ctx.access,
        article_id=article_id,
        content=payload.content,
        parent_comment_id=payload.parent_comment_id,
    )
    db.commit()
    db.refresh(comment)
    return success(request, comment_payload(comment), message="Comment created successfully")


@router.get(
    "",
    summary="查询评论线程",
    description="分页返回未删除的顶层评论（新到旧），每条附带一层未删除回复。",
    status_code=status.HTTP_200_OK,
    response_model=PageResponse[CommentThreadData],
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def list_comments(
    request: Request,
    article_id: UUID = Path(description="文章 ID。"),
    paging: PageParams = Depends(get_page_params),
    ctx: WorkspaceContext = Depends(require_workspace_member()),
    db: Session = Depends(get_db),
):
    article = get_active_article(db, workspace_id=ctx.workspace.id, article_id=article_id)
    threads, total = list_comment_threads(db, article_id=article.id, offset=paging.offset, limit=paging.limit)
    return success(request, [thread_payload(thread) for thread in threads], pagination=paging.meta(total))


@router.put(
    "/{comment_id}",
    summary="编辑评论",
    description="评论作者或 OWNER/EDITOR 可编辑。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[CommentData],
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def update_comment_route(
    payload: CommentUpdateRequest,
    request: Request,
    article_id: UUID = Path(description="文章 ID。"),
    comment_id: UUID = Path(description="评论 ID。"),
    ctx: WorkspaceContext = Depends(require_workspace_member()),
    db: Session = Depends(get_db),
):
    comment = update_comment(db, access=ctx.access, article_id=article_id, comment_id=comment_id, content=payload.content)
    db.commit()
    db.refresh(comment)
    return success(request, comment_payload(comment), message="Comment updated successfully")


@router.delete(
    "/{comment_id}",
    summary="删除评论",
    description="评论作者或 OWNER/EDITOR 可删除；删除为软删除。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[None],
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def delete_comment_route(
    request: Request,
    article_id: UUID = Path(description="文章 ID。"),
    comment_id: UUID = Path(description="评论 ID。"),
    ctx: WorkspaceContext = Depends(require_workspace_member()),
    db: Session = Depends(get_db),
):
    delete_comment(db, access=ctx.access, article_id=article_id, comment_id=comment_id)
    db.commit()
    return success(request, None, message="Comment deleted successfully")
