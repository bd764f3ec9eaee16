"""领域枚举定义。"""

from enum import StrEnum


class GlobalRole(StrEnum):
    """全局角色（严格有序：SUPER_ADMIN > ADMIN > USER）。"""

    SUPER_ADMIN = "SUPER_ADMIN"  # 平台超级管理员。
    ADMIN = "ADMIN"  # 平台管理员，可管理账号状态。
    USER = "USER"  # 普通用户。


# 全局角色等级，按 >= 比较。
GLOBAL_ROLE_RANK: dict[str, int] = {
    GlobalRole.USER: 1,
    GlobalRole.ADMIN: 2,
    GlobalRole.SUPER_ADMIN: 3,
}


class WorkspaceRole(StrEnum):
    """工作空间角色（无层级，按集合精确匹配）。"""

    OWNER = "OWNER"  # 工作空间所有者。
    EDITOR = "EDITOR"  # 可创建与编辑文章。
    VIEWER = "VIEWER"  # 仅可读。
    REVIEWER = "REVIEWER"  # 可评审文章。


class ArticleStatus(StrEnum):
    """文章状态。"""

    DRAFT = "DRAFT"  # 草稿。
    IN_REVIEW = "IN_REVIEW"  # 评审中。
    APPROVED = "APPROVED"  # 已通过。
    REJECTED = "REJECTED"  # 已驳回。


class ApprovalStatus(StrEnum):
    """单条评审结论。"""

    PENDING = "PENDING"  # 待评审（创建路径不会产生）。
    APPROVED = "APPROVED"  # 通过。
    REJECTED = "REJECTED"  # 驳回。


class NotificationType(StrEnum):
    """通知类型。"""

    COMMENT = "COMMENT"  # 文章收到评论。
    APPROVAL = "APPROVAL"  # 文章收到评审结论。
    MENTION = "MENTION"  # 被提及。
