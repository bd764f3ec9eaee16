"""文章接口：创建、查询、更新、归档与提交评审。"""

from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, Request, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from wcp_api.api.payloads import approval_payload, article_payload, thread_payload, version_payload
from wcp_api.db.session import get_db
from wcp_api.dependencies import WorkspaceContext, require_workspace_member
from wcp_api.models.article import Approval, Article, ArticleVersion
from wcp_api.models.enums import ArticleStatus
from wcp_api.schemas.article import ArticleCreateRequest, ArticleData, ArticleDetailData, ArticleUpdateRequest
from wcp_api.schemas.common import ErrorResponse, PageResponse, SuccessResponse
from wcp_api.services.authorization import ARTICLE_UPDATE_ROLES, CONTENT_WRITE_ROLES
from wcp_api.services.comments import list_comment_threads
from wcp_api.services.lifecycle import (
    archive_article,
    create_article,
    get_active_article,
    record_view,
    submit_for_review,
    update_article,
)
from wcp_api.services.tags import list_article_tags
from wcp_api.utils.pagination import PageParams, get_page_params
from wcp_api.utils.response import success

router = APIRouter(prefix="/workspaces/{workspace_id}/articles", tags=["articles"])

# 详情中返回的最近版本数。
DETAIL_VERSION_LIMIT = 5


def _with_tags(db: Session, article: Article) -> dict:
    tags = list_article_tags(db, article_ids=[article.id])[article.id]
    return article_payload(article, tags=tags)


@router.post(
    "",
    summary="创建文章",
    description="OWNER 与 EDITOR 可创建；文章以 DRAFT 状态开始，提供正文时记录第 1 版。",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessResponse[ArticleData],
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def create_article_route(
    payload: ArticleCreateRequest,
    request: Request,
    ctx: WorkspaceContext = Depends(require_workspace_member(*CONTENT_WRITE_ROLES)),
    db: Session = Depends(get_db),
):
    """创建草稿文章。"""
    article = create_article(db, access=ctx.access, title=payload.title, content=payload.content, tags=payload.tags)
    db.commit()
    db.refresh(article)
    return success(request, _with_tags(db, article), message="Article created successfully")


@router.get(
    "",
    summary="查询文章列表",
    description="任一成员可查询未归档文章，按最近更新时间倒序。",
    status_code=status.HTTP_200_OK,
    response_model=PageResponse[ArticleData],
    responses={403: {"model": ErrorResponse}},
)
def list_articles(
    request: Request,
    search: str | None = Query(default=None, description="按标题模糊匹配。"),
    status_filter: ArticleStatus | None = Query(default=None, alias="status", description="按状态过滤。"),
    author_id: UUID | None = Query(default=None, description="按作者过滤。"),
    paging: PageParams = Depends(get_page_params),
    ctx: WorkspaceContext = Depends(require_workspace_member()),
    db: Session = Depends(get_db),
):
    """分页查询文章。"""
    stmt = select(Article).where(Article.workspace_id == ctx.workspace.id).where(Article.is_archived.is_(False))
    if search:
        stmt = stmt.where(Article.title.ilike(f"%{search.strip()}%"))
    if status_filter is not None:
        stmt = stmt.where(Article.status == status_filter)
    if author_id is not None:
        stmt = stmt.where(Article.author_id == author_id)

    total = db.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()
    articles = (
        db.execute(stmt.order_by(Article.updated_at.desc()).offset(paging.offset).limit(paging.limit))
        .scalars()
        .all()
    )
    tags_by_article = list_article_tags(db, article_ids=[article.id for article in articles])
    data = [article_payload(article, tags=tags_by_article[article.id]) for article in articles]
    return success(request, data, pagination=paging.meta(total))


@router.get(
    "/{article_id}",
    summary="查询文章详情",
    description="任一成员可查看；每次成功读取浏览数加一。包含最近 5 个版本、评论线程与评审记录。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[ArticleDetailData],
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def get_article(
    request: Request,
    article_id: UUID = Path(description="文章 ID。"),
    ctx: WorkspaceContext = Depends(require_workspace_member()),
    db: Session = Depends(get_db),
):
    """读取文章详情并累加浏览数。"""
    article = get_active_article(db, workspace_id=ctx.workspace.id, article_id=article_id)
    record_view(db, article)
    db.commit()
    db.refresh(article)

    versions = (
        db.execute(
            select(ArticleVersion)
            .where(ArticleVersion.article_id == article.id)
            .order_by(ArticleVersion.version_number.desc())
            .limit(DETAIL_VERSION_LIMIT)
        )
        .scalars()
        .all()
    )
    threads, _ = list_comment_threads(db, article_id=article.id)
    approvals = (
        db.execute(select(Approval).where(Approval.article_id == article.id).order_by(Approval.created_at.asc()))
        .scalars()
        .all()
    )

    data = _with_tags(db, article)
    data.update(
        versions=[version_payload(version) for version in versions],
        comments=[thread_payload(thread) for thread in threads],
        approvals=[approval_payload(approval) for approval in approvals],
    )
    return success(request, data)


@router.put(
    "/{article_id}",
    summary="更新文章",
    description=(
        "OWNER/EDITOR 可修改标题、正文与标签，正文变更追加新版本；"
        "REVIEWER 只能请求状态 IN_REVIEW。状态仅支持 IN_REVIEW。"
    ),
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[ArticleData],
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def update_article_route(
    payload: ArticleUpdateRequest,
    request: Request,
    article_id: UUID = Path(description="文章 ID。"),
    ctx: WorkspaceContext = Depends(require_workspace_member(*ARTICLE_UPDATE_ROLES)),
    db: Session = Depends(get_db),
):
    article = update_article(
        db,
        access=ctx.access,
        article_id=article_id,
        title=payload.title,
        content=payload.content,
        status=payload.status,
        tags=payload.tags,
    )
    db.commit()
    db.refresh(article)
    return success(request, _with_tags(db, article), message="Article updated successfully")


@router.delete(
    "/{article_id}",
    summary="归档文章",
    description="OWNER 与 EDITOR 可归档；归档后文章不再出现在列表与详情中。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[None],
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def archive_article_route(
    request: Request,
    article_id: UUID = Path(description="文章 ID。"),
    ctx: WorkspaceContext = Depends(require_workspace_member(*CONTENT_WRITE_ROLES)),
    db: Session = Depends(get_db),
):
    archive_article(db, workspace_id=ctx.workspace.id, article_id=article_id)
    db.commit()
    return success(request, None, message="Article archived successfully")


@router.post(
    "/{article_id}/submit-review",
    summary="提交评审",
    description="仅作者可将 DRAFT 文章提交评审。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[ArticleData],
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def submit_review_route(
    request: Request,
    article_id: UUID = Path(description="文章 ID。"),
    ctx: WorkspaceContext = Depends(require_workspace_member(*CONTENT_WRITE_ROLES)),
    db: Session = Depends(get_db),
):
    article = submit_for_review(db, workspace_id=ctx.workspace.id, article_id=article_id, actor_id=ctx.user_id)
    db.commit()
    db.refresh(article)
    return success(request, _with_tags(db, article), message="Article submitted for review")
