"""文章版本接口。"""

from uuid import UUID

from fastapi import APIRouter, Depends, Path, Request, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from wcp_api.api.payloads import version_payload
from wcp_api.db.session import get_db
from wcp_api.dependencies import WorkspaceContext, require_workspace_member
from wcp_api.exceptions import NotFoundError
from wcp_api.models.article import ArticleVersion
from wcp_api.schemas.article import VersionCreateRequest, VersionData
from wcp_api.schemas.common import ErrorResponse, PageResponse, SuccessResponse
from wcp_api.services.authorization import CONTENT_WRITE_ROLES
from wcp_api.services.lifecycle import create_version, get_active_article
from wcp_api.utils.pagination import PageParams, get_page_params
from wcp_api.utils.response import success

router = APIRouter(prefix="/workspaces/{workspace_id}/articles/{article_id}/versions", tags=["versions"])


@router.get(
    "",
    summary="查询版本列表",
    description="任一成员可查询，按版本号倒序。",
    status_code=status.HTTP_200_OK,
    response_model=PageResponse[VersionData],
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def list_versions(
    request: Request,
    article_id: UUID = Path(description="文章 ID。"),
    paging: PageParams = Depends(get_page_params),
    ctx: WorkspaceContext = Depends(require_workspace_member()),
    db: Session = Depends(get_db),
):
    article = get_active_article(db, workspace_id=ctx.workspace.id, article_id=article_id)
    stmt = select(ArticleVersion).where(ArticleVersion.article_id == article.id)
    total = db.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()
    versions = (
        db.execute(stmt.order_by(ArticleVersion.version_number.desc()).offset(paging.offset).limit(paging.limit))
        .scalars()
        .all()
    )
    return success(request, [version_payload(version) for version in versions], pagination=paging.meta(total))


@router.get(
    "/{version_number}",
    summary="查询指定版本",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[VersionData],
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def get_version(
    request: Request,
    article_id: UUID = Path(description="文章 ID。"),
    version_number: int = Path(ge=1, description="版本号。"),
    ctx: WorkspaceContext = Depends(require_workspace_member()),
    db: Session = Depends(get_db),
):
    article = get_active_article(db, workspace_id=ctx.workspace.id, article_id=article_id)
    version = db.execute(
        select(ArticleVersion)
        .where(ArticleVersion.article_id == article.id)
        .where(ArticleVersion.version_number == version_number)
    ).scalar_one_or_none()
    if version is None:
        raise NotFoundError("Article version not found")
    return success(request, version_payload(version))


@router.post(
    "",
    summary="创建版本",
    description="OWNER 与 EDITOR 可追加版本；缺省标题取文章标题，缺省正文为空。",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessResponse[VersionData],
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def create_version_route(
    payload: VersionCreateRequest,
    request: Request,
    article_id: UUID = Path(description="文章 ID。"),
    ctx: WorkspaceContext = Depends(require_workspace_member(*CONTENT_WRITE_ROLES)),
    db: Session = Depends(get_db),
):
    article = get_active_article(db, workspace_id=ctx.workspace.id, article_id=article_id)
    version = create_version(
        db,
        article,
        editor_id=ctx.user_id,
        title=payload.title,
        content=payload.content,
        change_summary=payload.change_summary,
    )
    db.commit()
    db.refresh(version)
    return success(request, version_payload(version), message="Article version created successfully")
