"""服务层能力导出集合。"""

from wcp_api.services.approvals import aggregate_status, record_approval, recompute_article_status, update_approval
from wcp_api.services.authorization import (
    ARTICLE_UPDATE_ROLES,
    CONTENT_WRITE_ROLES,
    REVIEW_ROLES,
    WorkspaceAccess,
    ensure_minimum_global_role,
    evaluate_workspace_access,
    has_minimum_global_role,
)
from wcp_api.services.lifecycle import (
    ARTICLE_TRANSITIONS,
    assert_article_transition,
    build_article_slug,
    create_version,
    submit_for_review,
)
from wcp_api.services.local_auth import hash_password, normalize_email, verify_password
from wcp_api.services.notifications import mark_read, notify

__all__ = [
    "ARTICLE_TRANSITIONS",
    "ARTICLE_UPDATE_ROLES",
    "CONTENT_WRITE_ROLES",
    "REVIEW_ROLES",
    "WorkspaceAccess",
    "aggregate_status",
    "assert_article_transition",
    "build_article_slug",
    "create_version",
    "ensure_minimum_global_role",
    "evaluate_workspace_access",
    "has_minimum_global_role",
    "hash_password",
    "mark_read",
    "normalize_email",
    "notify",
    "record_approval",
    "recompute_article_status",
    "submit_for_review",
    "update_approval",
    "verify_password",
]
