from uuid import uuid4

import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session

from wcp_api.exceptions import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from wcp_api.models.collaboration import Notification
from wcp_api.models.enums import NotificationType, WorkspaceRole
from wcp_api.models.workspace import WorkspaceMember
from wcp_api.services.accounts import delete_user
from wcp_api.services.comments import create_comment, delete_comment, list_comment_threads, update_comment
from wcp_api.services.lifecycle import create_article, update_article
from wcp_api.services.notifications import delete_notification, mark_all_read, mark_read, notify, unread_count
from wcp_api.services.tags import count_tag_usage, create_tag, delete_tag, find_tag_by_name, rename_tag


@pytest.fixture
def space(db_session: Session, make_user, make_workspace, add_member, access_for):
    owner = make_user("Owner")
    author = make_user("Author")
    viewer = make_user("Viewer")
    workspace = make_workspace(owner)
    add_member(workspace, author, WorkspaceRole.EDITOR)
    add_member(workspace, viewer, WorkspaceRole.VIEWER)
    article = create_article(db_session, access=access_for(workspace, author), title="Guide", content="body")
    return {"workspace": workspace, "owner": owner, "author": author, "viewer": viewer, "article": article}


def test_comment_notifies_article_author_except_self(db_session: Session, space, access_for):
    workspace, article = space["workspace"], space["article"]

    comment = create_comment(db_session, access=access_for(workspace, space["viewer"]), article_id=article.id, content="Nice")
    create_comment(db_session, access=access_for(workspace, space["author"]), article_id=article.id, content="Thanks")

    notifications = db_session.execute(select(Notification)).scalars().all()
    assert [(n.user_id, n.type, n.reference_id) for n in notifications] == [
        (space["author"].id, NotificationType.COMMENT, comment.id)
    ]


def test_reply_requires_live_parent_in_same_article(db_session: Session, space, access_for):
    access = access_for(space["workspace"], space["viewer"])
    other = create_article(db_session, access=access_for(space["workspace"], space["owner"]), title="Other")
    foreign_parent = create_comment(db_session, access=access, article_id=other.id, content="elsewhere")

    with pytest.raises(NotFoundError) as exc_info:
        create_comment(
            db_session,
            access=access,
            article_id=space["article"].id,
            content="reply",
            parent_comment_id=foreign_parent.id,
        )
    assert exc_info.value.message == "Parent comment not found"


def test_reply_to_reply_is_rejected_until_parent_is_promoted(db_session: Session, space, access_for):
    article = space["article"]
    viewer_access = access_for(space["workspace"], space["viewer"])
    owner_access = access_for(space["workspace"], space["owner"])

    top = create_comment(db_session, access=viewer_access, article_id=article.id, content="top")
    reply = create_comment(db_session, access=owner_access, article_id=article.id, content="r1", parent_comment_id=top.id)

    with pytest.raises(BadRequestError) as exc_info:
        create_comment(db_session, access=viewer_access, article_id=article.id, content="r2", parent_comment_id=reply.id)
    assert exc_info.value.code == "INVALID_PARENT"

    # 父评论删除后回复被提升为顶层，可以继续被回复。
    delete_comment(db_session, access=viewer_access, article_id=article.id, comment_id=top.id)
    nested = create_comment(
        db_session, access=viewer_access, article_id=article.id, content="r2", parent_comment_id=reply.id
    )

    threads, total = list_comment_threads(db_session, article_id=article.id)
    assert total == 1
    assert threads[0].comment.id == reply.id
    assert [r.id for r in threads[0].replies] == [nested.id]


def test_blank_comment_is_rejected(db_session: Session, space, access_for):
    with pytest.raises(BadRequestError):
        create_comment(
            db_session,
            access=access_for(space["workspace"], space["viewer"]),
            article_id=space["article"].id,
            content="   ",
        )


def test_comment_moderation_permissions(db_session: Session, space, access_for):
    workspace, article = space["workspace"], space["article"]
    comment = create_comment(db_session, access=access_for(workspace, space["owner"]), article_id=article.id, content="x")

    with pytest.raises(ForbiddenError):
        update_comment(
            db_session,
            access=access_for(workspace, space["viewer"]),
            article_id=article.id,
            comment_id=comment.id,
            content="edited",
        )

    edited = update_comment(
        db_session,
        access=access_for(workspace, space["author"]),
        article_id=article.id,
        comment_id=comment.id,
        content="edited",
    )
    assert edited.is_edited is True
    assert edited.content == "edited"


def test_threads_hide_deleted_comments_and_promote_orphaned_replies(db_session: Session, space, access_for):
    workspace, article = space["workspace"], space["article"]
    viewer_access = access_for(workspace, space["viewer"])
    owner_access = access_for(workspace, space["owner"])

    root = create_comment(db_session, access=viewer_access, article_id=article.id, content="root")
    reply = create_comment(db_session, access=owner_access, article_id=article.id, content="reply", parent_comment_id=root.id)
    hidden = create_comment(db_session, access=owner_access, article_id=article.id, content="gone", parent_comment_id=root.id)
    delete_comment(db_session, access=owner_access, article_id=article.id, comment_id=hidden.id)

    threads, total = list_comment_threads(db_session, article_id=article.id)
    assert total == 1
    assert threads[0].comment.id == root.id
    assert [r.id for r in threads[0].replies] == [reply.id]

    delete_comment(db_session, access=viewer_access, article_id=article.id, comment_id=root.id)
    threads, total = list_comment_threads(db_session, article_id=article.id)
    assert total == 1
    assert threads[0].comment.id == reply.id
    assert threads[0].replies == []


def test_tag_names_are_trimmed_and_unique_per_workspace(db_session: Session, space, make_user, make_workspace):
    workspace = space["workspace"]
    tag = create_tag(db_session, workspace_id=workspace.id, name="  release  ", created_by_id=space["owner"].id)
    assert tag.name == "release"

    with pytest.raises(ConflictError):
        create_tag(db_session, workspace_id=workspace.id, name="release", created_by_id=space["owner"].id)

    other_workspace = make_workspace(make_user("Else"), "Else")
    same_name = create_tag(db_session, workspace_id=other_workspace.id, name="release", created_by_id=space["owner"].id)
    assert same_name.id != tag.id

    with pytest.raises(BadRequestError):
        create_tag(db_session, workspace_id=workspace.id, name="   ", created_by_id=space["owner"].id)


def test_tag_rename_excludes_itself_from_uniqueness(db_session: Session, space):
    workspace = space["workspace"]
    tag = create_tag(db_session, workspace_id=workspace.id, name="draft", created_by_id=space["owner"].id)
    create_tag(db_session, workspace_id=workspace.id, name="final", created_by_id=space["owner"].id)

    assert rename_tag(db_session, tag, name=" draft ").name == "draft"
    with pytest.raises(ConflictError):
        rename_tag(db_session, tag, name="final")


def test_tag_in_use_cannot_be_deleted(db_session: Session, space, access_for):
    workspace = space["workspace"]
    create_article(db_session, access=access_for(workspace, space["owner"]), title="Tagged", tags=["ops"])
    unused = create_tag(db_session, workspace_id=workspace.id, name="unused", created_by_id=space["owner"].id)
    used = find_tag_by_name(db_session, workspace_id=workspace.id, name="ops")
    assert count_tag_usage(db_session, tag_id=used.id) == 1

    with pytest.raises(BadRequestError) as exc_info:
        delete_tag(db_session, used)
    assert exc_info.value.code == "TAG_IN_USE"

    delete_tag(db_session, unused)
    assert find_tag_by_name(db_session, workspace_id=workspace.id, name="unused") is None


def test_notification_read_bookkeeping(db_session: Session, make_user):
    alice = make_user("Alice")
    bob = make_user("Bob")
    first = notify(
        db_session, recipient_id=alice.id, actor_id=bob.id, notification_type=NotificationType.COMMENT, reference_id=None
    )
    second = notify(
        db_session, recipient_id=alice.id, actor_id=bob.id, notification_type=NotificationType.MENTION, reference_id=None
    )
    bobs = notify(
        db_session, recipient_id=bob.id, actor_id=alice.id, notification_type=NotificationType.COMMENT, reference_id=None
    )
    assert notify(
        db_session, recipient_id=alice.id, actor_id=alice.id, notification_type=NotificationType.COMMENT, reference_id=None
    ) is None
    assert unread_count(db_session, user_id=alice.id) == 2

    # 包含他人通知时整体失败，不做部分更新。
    with pytest.raises(NotFoundError):
        mark_read(db_session, user_id=alice.id, notification_ids=[first.id, bobs.id])
    assert unread_count(db_session, user_id=alice.id) == 2

    assert mark_read(db_session, user_id=alice.id, notification_ids=[first.id]) == 1
    assert unread_count(db_session, user_id=alice.id) == 1
    assert mark_all_read(db_session, user_id=alice.id) == 1
    assert unread_count(db_session, user_id=alice.id) == 0

    with pytest.raises(NotFoundError):
        delete_notification(db_session, user_id=alice.id, notification_id=bobs.id)
    with pytest.raises(NotFoundError):
        delete_notification(db_session, user_id=alice.id, notification_id=uuid4())
    delete_notification(db_session, user_id=alice.id, notification_id=second.id)


def test_user_with_authored_content_cannot_be_deleted(db_session: Session, space):
    with pytest.raises(ConflictError) as exc_info:
        delete_user(db_session, space["author"])
    assert exc_info.value.code == "USER_HAS_CONTENT"
    assert "articles" in exc_info.value.detail["details"]["content"]


def test_user_without_content_is_deleted_with_memberships(db_session: Session, space):
    viewer = space["viewer"]

    delete_user(db_session, viewer)

    memberships = db_session.execute(select(WorkspaceMember).where(WorkspaceMember.user_id == viewer.id)).all()
    assert memberships == []


def test_deleted_user_is_cleared_as_last_editor(db_session: Session, space, make_user, add_member, access_for):
    renamer = make_user("Renamer")
    add_member(space["workspace"], renamer, WorkspaceRole.EDITOR)
    article = space["article"]
    update_article(db_session, access=access_for(space["workspace"], renamer), article_id=article.id, title="Renamed")
    assert article.last_edited_by_id == renamer.id

    delete_user(db_session, renamer)
    db_session.refresh(article)

    assert article.last_edited_by_id is None
    assert article.title == "Renamed"
