"""评审接口。"""

from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, Request, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from wcp_api.api.payloads import approval_payload
from wcp_api.db.session import get_db
from wcp_api.dependencies import WorkspaceContext, require_workspace_member
from wcp_api.models.article import Approval, Article
from wcp_api.models.enums import ApprovalStatus
from wcp_api.schemas.approval import ApprovalData, ApprovalDecisionRequest, ApprovalResultData
from wcp_api.schemas.common import ErrorResponse, PageResponse, SuccessResponse
from wcp_api.services.approvals import record_approval, update_approval
from wcp_api.services.authorization import CONTENT_WRITE_ROLES, REVIEW_ROLES
from wcp_api.services.lifecycle import get_active_article
from wcp_api.utils.pagination import PageParams, get_page_params
from wcp_api.utils.response import success

router = APIRouter(prefix="/workspaces/{workspace_id}", tags=["approvals"])


@router.post(
    "/articles/{article_id}/approvals",
    summary="提交评审结论",
    description="REVIEWER、EDITOR、OWNER 可提交；每位评审人对每篇文章只能提交一次，提交后重新计算文章状态。",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessResponse[ApprovalResultData],
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
def create_approval(
    payload: ApprovalDecisionRequest,
    request: Request,
    article_id: UUID = Path(description="文章 ID。"),
    ctx: WorkspaceContext = Depends(require_workspace_member(*REVIEW_ROLES)),
    db: Session = Depends(get_db),
):
    """记录评审结论。"""
    approval = record_approval(
        db,
        access=ctx.access,
        article_id=article_id,
        status=payload.status,
        feedback=payload.feedback,
    )
    article_status = db.get(Article, approval.article_id).status
    db.commit()
    data = approval_payload(approval)
    data["article_status"] = article_status
    return success(request, data, message=f"Article {payload.status.lower()} successfully")


@router.get(
    "/articles/{article_id}/approvals",
    summary="查询文章评审记录",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[list[ApprovalData]],
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def list_article_approvals(
    request: Request,
    article_id: UUID = Path(description="文章 ID。"),
    ctx: WorkspaceContext = Depends(require_workspace_member()),
    db: Session = Depends(get_db),
):
    article = get_active_article(db, workspace_id=ctx.workspace.id, article_id=article_id)
    approvals = (
        db.execute(select(Approval).where(Approval.article_id == article.id).order_by(Approval.created_at.asc()))
        .scalars()
        .all()
    )
    return success(request, [approval_payload(approval) for approval in approvals])


@router.get(
    "/approvals",
    summary="查询工作空间评审记录",
    description="任一成员可查询，支持按结论与评审人过滤。",
    status_code=status.HTTP_200_OK,
    response_model=PageResponse[ApprovalData],
    responses={403: {"model": ErrorResponse}},
)
def list_workspace_approvals(
    request: Request,
    status_filter: ApprovalStatus | None = Query(default=None, alias="status", description="按评审结论过滤。"),
    reviewer_id: UUID | None = Query(default=None, description="按评审人过滤。"),
    paging: PageParams = Depends(get_page_params),
    ctx: WorkspaceContext = Depends(require_workspace_member()),
    db: Session = Depends(get_db),
):
    stmt = (
        select(Approval)
        .join(Article, Article.id == Approval.article_id)
        .where(Article.workspace_id == ctx.workspace.id)
        .where(Article.is_archived.is_(False))
    )
    if status_filter is not None:
        stmt = stmt.where(Approval.status == status_filter)
    if reviewer_id is not None:
        stmt = stmt.where(Approval.reviewer_id == reviewer_id)

    total = db.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()
    approvals = (
        db.execute(stmt.order_by(Approval.created_at.desc()).offset(paging.offset).limit(paging.limit))
        .scalars()
        .all()
    )
    return success(request, [approval_payload(approval) for approval in approvals], pagination=paging.meta(total))


@router.put(
    "/approvals/{approval_id}",
    summary="修改评审结论",
    description="OWNER 与 EDITOR 可修改；修改后重新计算文章状态，不产生通知。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[ApprovalResultData],
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def update_approval_route(
    payload: ApprovalDecisionRequest,
    request: Request,
    approval_id: UUID = Path(description="评审记录 ID。"),
    ctx: WorkspaceContext = Depends(require_workspace_member(*CONTENT_WRITE_ROLES)),
    db: Session = Depends(get_db),
):
    approval = update_approval(
        db,
        workspace_id=ctx.workspace.id,
        approval_id=approval_id,
        status=payload.status,
        feedback=payload.feedback,
    )
    article_status = db.get(Article, approval.article_id).status
    db.commit()
    data = approval_payload(approval)
    data["article_status"] = article_status
    return success(request, data, message="Approval updated successfully")
