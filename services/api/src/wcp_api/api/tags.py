"""标签接口。"""

from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, Request, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from wcp_api.api.payloads import tag_payload
from wcp_api.db.session import get_db
from wcp_api.dependencies import WorkspaceContext, require_workspace_member
from wcp_api.models.collaboration import ArticleTag, Tag
from wcp_api.schemas.common import ErrorResponse, PageResponse, SuccessResponse
from wcp_api.schemas.tag import TagCreateRequest, TagData, TagUpdateRequest
from wcp_api.services.authorization import CONTENT_WRITE_ROLES
from wcp_api.services.tags import count_tag_usage, create_tag, delete_tag, get_tag, rename_tag
from wcp_api.utils.pagination import PageParams, get_page_params
from wcp_api.utils.response import success

router = APIRouter(prefix="/workspaces/{workspace_id}/tags", tags=["tags"])


@router.post(
    "",
    summary="创建标签",
    description="OWNER 与 EDITOR 可创建；名称去除首尾空白后在工作空间内唯一。",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessResponse[TagData],
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def create_tag_route(
    payload: TagCreateRequest,
    request: Request,
    ctx: WorkspaceContext = Depends(require_workspace_member(*CONTENT_WRITE_ROLES)),
    db: Session = Depends(get_db),
):
    tag = create_tag(db, workspace_id=ctx.workspace.id, name=payload.name, created_by_id=ctx.user_id)
    db.commit()
    db.refresh(tag)
    return success(request, tag_payload(tag), message="Tag created successfully")


@router.get(
    "",
    summary="查询标签列表",
    description="任一成员可查询，附带引用文章数。",
    status_code=status.HTTP_200_OK,
    response_model=PageResponse[TagData],
    responses={403: {"model": ErrorResponse}},
)
def list_tags(
    request: Request,
    search: str | None = Query(default=None, description="按名称模糊匹配。"),
    paging: PageParams = Depends(get_page_params),
    ctx: WorkspaceContext = Depends(require_workspace_member()),
    db: Session = Depends(get_db),
):
    stmt = select(Tag).where(Tag.workspace_id == ctx.workspace.id)
    if search:
        stmt = stmt.where(Tag.name.ilike(f"%{search.strip()}%"))
    total = db.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()
    tags = db.execute(stmt.order_by(Tag.name.asc()).offset(paging.offset).limit(paging.limit)).scalars().all()

    usage: dict[UUID, int] = {}
    if tags:
        usage = dict(
            db.execute(
                select(ArticleTag.tag_id, func.count())
                .where(ArticleTag.tag_id.in_([tag.id for tag in tags]))
                .group_by(ArticleTag.tag_id)
            ).all()
        )
    data = [tag_payload(tag, article_count=usage.get(tag.id, 0)) for tag in tags]
    return success(request, data, pagination=paging.meta(total))


@router.get(
    "/{tag_id}",
    summary="查询标签详情",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[TagData],
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def get_tag_route(
    request: Request,
    tag_id: UUID = Path(description="标签 ID。"),
    ctx: WorkspaceContext = Depends(require_workspace_member()),
    db: Session = Depends(get_db),
):
    tag = get_tag(db, workspace_id=ctx.workspace.id, tag_id=tag_id)
    return success(request, tag_payload(tag, article_count=count_tag_usage(db, tag_id=tag.id)))


@router.put(
    "/{tag_id}",
    summary="重命名标签",
    description="OWNER 与 EDITOR 可重命名；唯一性检查排除自身。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[TagData],
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def update_tag_route(
    payload: TagUpdateRequest,
    request: Request,
    tag_id: UUID = Path(description="标签 ID。"),
    ctx: WorkspaceContext = Depends(require_workspace_member(*CONTENT_WRITE_ROLES)),
    db: Session = Depends(get_db),
):
    tag = get_tag(db, workspace_id=ctx.workspace.id, tag_id=tag_id)
    rename_tag(db, tag, name=payload.name)
    db.commit()
    db.refresh(tag)
    return success(
        request,
        tag_payload(tag, article_count=count_tag_usage(db, tag_id=tag.id)),
        message="Tag updated successfully",
    )


@router.delete(
    "/{tag_id}",
    summary="删除标签",
    description="OWNER 与 EDITOR 可删除；仍被文章引用时拒绝。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[None],
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def delete_tag_route(
    request: Request,
    tag_id: UUID = Path(description="标签 ID。"),
    ctx: WorkspaceContext = Depends(require_workspace_member(*CONTENT_WRITE_ROLES)),
    db: Session = Depends(get_db),
):
    tag = get_tag(db, workspace_id=ctx.workspace.id, tag_id=tag_id)
    delete_tag(db, tag)
    db.commit()
    return success(request, None, message="Tag deleted successfully")
