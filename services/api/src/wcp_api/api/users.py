"""当前用户资料接口。"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from wcp_api.api.payloads import user_payload
from wcp_api.db.session import get_db
from wcp_api.dependencies import get_current_user
from wcp_api.exceptions import BadRequestError
from wcp_api.models.user import User
from wcp_api.schemas.auth import ChangePasswordRequest
from wcp_api.schemas.common import ErrorResponse, SuccessResponse
from wcp_api.schemas.user import ProfileUpdateRequest, UserData, UserWorkspaceItem
from wcp_api.services.accounts import delete_user
from wcp_api.services.local_auth import hash_password, verify_password
from wcp_api.services.workspaces import list_user_workspaces
from wcp_api.utils.response import success

router = APIRouter(prefix="/users", tags=["users"])


@router.get(
    "/profile",
    summary="查询个人资料",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[UserData],
    responses={401: {"model": ErrorResponse}},
)
def get_profile(request: Request, user: User = Depends(get_current_user)):
    return success(request, user_payload(user))


@router.put(
    "/profile",
    summary="更新个人资料",
    description="可更新展示名与头像。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[UserData],
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
def update_profile(
    payload: ProfileUpdateRequest,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """更新个人资料。"""
    if payload.name is not None:
        user.name = payload.name.strip()
    if "avatar" in payload.model_fields_set:
        user.avatar = payload.avatar
    db.commit()
    db.refresh(user)
    return success(request, user_payload(user), message="Profile updated successfully")


@router.post(
    "/change-password",
    summary="修改密码",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[None],
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
def change_password(
    payload: ChangePasswordRequest,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """校验当前密码后设置新密码。"""
    if not verify_password(payload.current_password, user.password_hash):
        raise BadRequestError("Current password is incorrect", code="INVALID_CREDENTIALS")
    user.password_hash = hash_password(payload.new_password)
    db.commit()
    return success(request, None, message="Password changed successfully")


@router.get(
    "/workspaces",
    summary="查询我的工作空间",
    description="返回当前用户所属且未归档的工作空间及角色。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[list[UserWorkspaceItem]],
    responses={401: {"model": ErrorResponse}},
)
def my_workspaces(request: Request, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    items, _ = list_user_workspaces(db, user_id=user.id)
    return success(
        request,
        [
            {
                "workspace_id": item.workspace.id,
                "name": item.workspace.name,
                "description": item.workspace.description,
                "role": item.role,
                "joined_at": item.joined_at,
            }
            for item in items
        ],
    )


@router.delete(
    "",
    summary="删除当前账号",
    description="仍署名文章、版本、标签、评论、评审或创建过工作空间时拒绝删除。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[None],
    responses={401: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def delete_account(request: Request, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    delete_user(db, user)
    db.commit()
    return success(request, None, message="Account deleted successfully")
