from itertools import permutations

import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session

from wcp_api.exceptions import BadRequestError, ConflictError, ForbiddenError, InvalidTransitionError, NotFoundError
from wcp_api.models.collaboration import Notification
from wcp_api.models.enums import ApprovalStatus, ArticleStatus, NotificationType, WorkspaceRole
from wcp_api.services.approvals import aggregate_status, record_approval, update_approval
from wcp_api.services.lifecycle import create_article, submit_for_review


@pytest.mark.parametrize(
    ("statuses", "current", "expected"),
    [
        ([], ArticleStatus.IN_REVIEW, ArticleStatus.IN_REVIEW),
        ([ApprovalStatus.APPROVED], ArticleStatus.IN_REVIEW, ArticleStatus.APPROVED),
        ([ApprovalStatus.APPROVED, ApprovalStatus.APPROVED], ArticleStatus.IN_REVIEW, ArticleStatus.APPROVED),
        ([ApprovalStatus.APPROVED, ApprovalStatus.REJECTED], ArticleStatus.APPROVED, ArticleStatus.REJECTED),
        ([ApprovalStatus.PENDING, ApprovalStatus.APPROVED], ArticleStatus.IN_REVIEW, ArticleStatus.IN_REVIEW),
    ],
)
def test_aggregate_status(statuses, current, expected):
    assert aggregate_status(statuses, current) == expected


def test_aggregate_status_is_order_independent():
    statuses = [ApprovalStatus.APPROVED, ApprovalStatus.REJECTED, ApprovalStatus.APPROVED, ApprovalStatus.PENDING]
    results = {aggregate_status(order, ArticleStatus.IN_REVIEW) for order in permutations(statuses)}

    assert results == {ArticleStatus.REJECTED}


@pytest.fixture
def review_setup(db_session: Session, make_user, make_workspace, add_member, access_for):
    owner = make_user("Owner")
    author = make_user("Author")
    first = make_user("FirstReviewer")
    second = make_user("SecondReviewer")
    viewer = make_user("Viewer")
    workspace = make_workspace(owner)
    add_member(workspace, author, WorkspaceRole.EDITOR)
    add_member(workspace, first, WorkspaceRole.REVIEWER)
    add_member(workspace, second, WorkspaceRole.REVIEWER)
    add_member(workspace, viewer, WorkspaceRole.VIEWER)
    article = create_article(db_session, access=access_for(workspace, author), title="Policy", content="text")
    return {
        "workspace": workspace,
        "owner": owner,
        "author": author,
        "first": first,
        "second": second,
        "viewer": viewer,
        "article": article,
    }


def _submit(db: Session, setup) -> None:
    submit_for_review(
        db,
        workspace_id=setup["workspace"].id,
        article_id=setup["article"].id,
        actor_id=setup["author"].id,
    )


def test_draft_articles_cannot_be_reviewed(db_session: Session, review_setup, access_for):
    with pytest.raises(InvalidTransitionError):
        record_approval(
            db_session,
            access=access_for(review_setup["workspace"], review_setup["first"]),
            article_id=review_setup["article"].id,
            status=ApprovalStatus.APPROVED,
        )


def test_approve_then_reject_flips_article_status(db_session: Session, review_setup, access_for):
    _submit(db_session, review_setup)
    workspace = review_setup["workspace"]
    article = review_setup["article"]

    record_approval(
        db_session,
        access=access_for(workspace, review_setup["first"]),
        article_id=article.id,
        status=ApprovalStatus.APPROVED,
    )
    assert article.status == ArticleStatus.APPROVED

    record_approval(
        db_session,
        access=access_for(workspace, review_setup["second"]),
        article_id=article.id,
        status=ApprovalStatus.REJECTED,
        feedback="needs sources",
    )
    assert article.status == ArticleStatus.REJECTED


def test_reviewer_can_review_only_once(db_session: Session, review_setup, access_for):
    _submit(db_session, review_setup)
    access = access_for(review_setup["workspace"], review_setup["first"])
    record_approval(db_session, access=access, article_id=review_setup["article"].id, status=ApprovalStatus.APPROVED)

    with pytest.raises(ConflictError) as exc_info:
        record_approval(
            db_session,
            access=access,
            article_id=review_setup["article"].id,
            status=ApprovalStatus.REJECTED,
        )
    assert exc_info.value.code == "ALREADY_REVIEWED"


def test_review_requires_decision_and_review_role(db_session: Session, review_setup, access_for):
    _submit(db_session, review_setup)
    workspace = review_setup["workspace"]

    with pytest.raises(BadRequestError):
        record_approval(
            db_session,
            access=access_for(workspace, review_setup["first"]),
            article_id=review_setup["article"].id,
            status=ApprovalStatus.PENDING,
        )
    with pytest.raises(ForbiddenError):
        record_approval(
            db_session,
            access=access_for(workspace, review_setup["viewer"]),
            article_id=review_setup["article"].id,
            status=ApprovalStatus.APPROVED,
        )


def test_approval_notifies_author_but_not_self(db_session: Session, review_setup, access_for):
    _submit(db_session, review_setup)
    workspace = review_setup["workspace"]
    article = review_setup["article"]

    approval = record_approval(
        db_session,
        access=access_for(workspace, review_setup["first"]),
        article_id=article.id,
        status=ApprovalStatus.APPROVED,
    )
    # 作者本人（EDITOR）评审自己的文章不产生通知。
    record_approval(
        db_session,
        access=access_for(workspace, review_setup["author"]),
        article_id=article.id,
        status=ApprovalStatus.APPROVED,
    )

    notifications = db_session.execute(select(Notification)).scalars().all()
    assert [(n.user_id, n.type, n.reference_id) for n in notifications] == [
        (review_setup["author"].id, NotificationType.APPROVAL, approval.id)
    ]


def test_update_approval_recomputes_without_notification(db_session: Session, review_setup, access_for):
    _submit(db_session, review_setup)
    workspace = review_setup["workspace"]
    article = review_setup["article"]
    approval = record_approval(
        db_session,
        access=access_for(workspace, review_setup["first"]),
        article_id=article.id,
        status=ApprovalStatus.REJECTED,
    )
    assert article.status == ArticleStatus.REJECTED

    update_approval(db_session, workspace_id=workspace.id, approval_id=approval.id, status=ApprovalStatus.APPROVED)

    assert article.status == ArticleStatus.APPROVED
    assert len(db_session.execute(select(Notification)).scalars().all()) == 1


def test_update_approval_is_scoped_to_workspace(db_session: Session, review_setup, make_user, make_workspace, access_for):
    _submit(db_session, review_setup)
    approval = record_approval(
        db_session,
        access=access_for(review_setup["workspace"], review_setup["first"]),
        article_id=review_setup["article"].id,
        status=ApprovalStatus.APPROVED,
    )
    other_workspace = make_workspace(make_user("Stranger"), "Elsewhere")

    with pytest.raises(NotFoundError):
        update_approval(
            db_session,
            workspace_id=other_workspace.id,
            approval_id=approval.id,
            status=ApprovalStatus.REJECTED,
        )
