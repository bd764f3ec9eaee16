from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from wcp_api.api import auth as auth_api
from wcp_api.main import app
from wcp_api.models.enums import GlobalRole
from wcp_api.models.user import User

PASSWORD = "StrongPassw0rd!"


def _require_keys(data: dict, keys: list[str], where: str) -> None:
    missing = [k for k in keys if k not in data]
    assert not missing, f"{where} missing keys: {missing}"


class Api:
    """封装 HTTP 调用与统一响应结构校验。"""

    def __init__(self, client: TestClient) -> None:
        self.client = client

    def call(self, method: str, path: str, *, token: str | None = None, expected_status: int = 200, **kwargs):
        headers = dict(kwargs.pop("headers", {}) or {})
        if token:
            headers["Authorization"] = f"Bearer {token}"
        response = self.client.request(method, path, headers=headers, **kwargs)
        assert response.status_code == expected_status, (
            f"{method} {path} expected {expected_status}, got {response.status_code}: {response.text}"
        )
        assert response.headers.get("X-Request-Id")
        return response

    def ok(self, method: str, path: str, *, expected_status: int = 200, **kwargs):
        payload = self.call(method, path, expected_status=expected_status, **kwargs).json()
        _require_keys(payload, ["success", "message", "request_id", "data"], f"{method} {path}")
        assert payload["success"] is True
        assert payload["request_id"]
        return payload["data"]

    def page(self, method: str, path: str, **kwargs) -> tuple[list, dict]:
        payload = self.call(method, path, **kwargs).json()
        _require_keys(payload, ["success", "data", "pagination"], f"{method} {path}")
        _require_keys(payload["pagination"], ["page", "limit", "total", "pages"], "pagination")
        return payload["data"], payload["pagination"]

    def fail(self, method: str, path: str, *, expected_status: int, **kwargs) -> dict:
        payload = self.call(method, path, expected_status=expected_status, **kwargs).json()
        _require_keys(payload, ["success", "message", "request_id", "error"], f"{method} {path}")
        assert payload["success"] is False
        assert payload["message"]
        return payload

    def register(self, name: str) -> tuple[str, str]:
        data = self.ok(
            "POST",
            "/api/auth/register",
            expected_status=201,
            json={"name": name, "email": f"{name.lower()}-{uuid4().hex[:6]}@example.com", "password": PASSWORD},
        )
        _require_keys(data, ["access_token", "token_type", "expires_in", "user"], "auth.register")
        return data["access_token"], data["user"]["id"]


@pytest.fixture
def api(api_client: TestClient) -> Api:
    return Api(api_client)


@pytest.mark.smoke
def test_health_and_unmatched_route(api: Api):
    payload = api.call("GET", "/health").json()
    assert payload["success"] is True
    assert payload["message"] == "Server is healthy"
    assert api.ok("GET", "/health/ready")["status"] == "ready"

    missing = api.fail("GET", "/api/does-not-exist", expected_status=404)
    assert missing["message"] == "Can't find /api/does-not-exist on this server!"


@pytest.mark.smoke
def test_auth_session_lifecycle(api: Api, api_client: TestClient):
    token, user_id = api.register("Alice")
    me = api.ok("GET", "/api/auth/me", token=token)
    assert me["id"] == user_id
    assert "password_hash" not in me

    api.fail("GET", "/api/auth/me", expected_status=401)
    api.fail("GET", "/api/auth/me", token="not-a-jwt", expected_status=401)

    bad_login = api.fail(
        "POST",
        "/api/auth/login",
        expected_status=400,
        json={"email": me["email"], "password": "wrong-password"},
    )
    assert bad_login["message"] == "Invalid credentials"

    login = api.ok("POST", "/api/auth/login", json={"email": me["email"].upper(), "password": PASSWORD})
    assert login["user"]["last_login_at"]

    refreshed = api.ok("GET", "/api/auth/refresh")
    assert api.ok("GET", "/api/auth/me", token=refreshed["access_token"])["id"] == user_id

    assert api.ok("POST", "/api/auth/logout", token=token)["logged_out"] is True
    api_client.cookies.clear()
    api.fail("GET", "/api/auth/refresh", expected_status=401)


def test_duplicate_registration_and_validation_errors(api: Api):
    api.ok(
        "POST",
        "/api/auth/register",
        expected_status=201,
        json={"name": "Bob", "email": "bob@example.com", "password": PASSWORD},
    )
    duplicate = api.fail(
        "POST",
        "/api/auth/register",
        expected_status=409,
        json={"name": "Bob", "email": "BOB@example.com", "password": PASSWORD},
    )
    assert duplicate["error"]["code"] == "EMAIL_TAKEN"

    short = api.fail(
        "POST",
        "/api/auth/register",
        expected_status=400,
        json={"name": "Carol", "email": "carol@example.com", "password": "short"},
    )
    assert short["error"]["code"] == "VALIDATION_ERROR"


def test_password_reset_flow(api: Api, monkeypatch: pytest.MonkeyPatch):
    sent: list[dict] = []
    monkeypatch.setattr(auth_api, "send_email", lambda **kwargs: sent.append(kwargs))
    token, _ = api.register("Dana")
    email = api.ok("GET", "/api/auth/me", token=token)["email"]

    api.ok("POST", "/api/auth/forgot-password", json={"email": "nobody@example.com"})
    assert sent == []
    api.ok("POST", "/api/auth/forgot-password", json={"email": email})
    assert len(sent) == 1
    raw_token = sent[0]["body"].rsplit(" ", 1)[-1]

    assert api.ok("POST", "/api/auth/verify-reset-token", json={"token": raw_token})["valid"] is True
    api.ok("POST", "/api/auth/reset-password", json={"token": raw_token, "password": "AnotherPassw0rd"})
    api.fail("POST", "/api/auth/verify-reset-token", expected_status=400, json={"token": raw_token})

    api.fail("POST", "/api/auth/login", expected_status=400, json={"email": email, "password": PASSWORD})
    api.ok("POST", "/api/auth/login", json={"email": email, "password": "AnotherPassw0rd"})


@pytest.mark.smoke
def test_review_workflow_end_to_end(api: Api):
    owner_token, _ = api.register("Owner")
    editor_token, _ = api.register("Editor")
    first_token, _ = api.register("FirstReviewer")
    second_token, _ = api.register("SecondReviewer")
    viewer_token, _ = api.register("Viewer")

    workspace = api.ok(
        "POST",
        "/api/workspaces",
        token=owner_token,
        expected_status=201,
        json={"name": "Handbook", "description": "Team docs"},
    )
    assert workspace["role"] == "OWNER"
    base = f"/api/workspaces/{workspace['id']}"

    invitations = (
        (editor_token, "EDITOR"),
        (first_token, "REVIEWER"),
        (second_token, "REVIEWER"),
        (viewer_token, "VIEWER"),
    )
    for token, role in invitations:
        email = api.ok("GET", "/api/auth/me", token=token)["email"]
        member = api.ok(
            "POST",
            f"{base}/invite",
            token=owner_token,
            expected_status=201,
            json={"email": email, "role": role},
        )
        assert member["role"] == role

    article = api.ok(
        "POST",
        f"{base}/articles",
        token=editor_token,
        expected_status=201,
        json={"title": "Incident Runbook", "content": "Step 1", "tags": ["ops", " oncall "]},
    )
    assert article["status"] == "DRAFT"
    assert sorted(tag["name"] for tag in article["tags"]) == ["oncall", "ops"]
    article_path = f"{base}/articles/{article['id']}"

    api.fail("POST", f"{base}/articles", token=viewer_token, expected_status=403, json={"title": "Nope"})
    early = api.fail(
        "POST",
        f"{article_path}/approvals",
        token=first_token,
        expected_status=400,
        json={"status": "APPROVED"},
    )
    assert early["error"]["code"] == "INVALID_TRANSITION"

    version = api.ok(
        "POST",
        f"{article_path}/versions",
        token=editor_token,
        expected_status=201,
        json={"content": "Step 1\nStep 2", "change_summary": "add step"},
    )
    assert version["version_number"] == 2

    submitted = api.ok("POST", f"{article_path}/submit-review", token=editor_token)
    assert submitted["status"] == "IN_REVIEW"

    first = api.ok(
        "POST",
        f"{article_path}/approvals",
        token=first_token,
        expected_status=201,
        json={"status": "APPROVED"},
    )
    assert first["article_status"] == "APPROVED"

    second = api.ok(
        "POST",
        f"{article_path}/approvals",
        token=second_token,
        expected_status=201,
        json={"status": "REJECTED", "feedback": "missing rollback"},
    )
    assert second["article_status"] == "REJECTED"

    duplicate = api.fail(
        "POST",
        f"{article_path}/approvals",
        token=first_token,
        expected_status=409,
        json={"status": "REJECTED"},
    )
    assert duplicate["error"]["code"] == "ALREADY_REVIEWED"

    comment = api.ok("POST", f"{article_path}/comments", token=viewer_token, expected_status=201, json={"content": "+1"})
    api.ok(
        "POST",
        f"{article_path}/comments",
        token=editor_token,
        expected_status=201,
        json={"content": "thanks", "parent_comment_id": comment["id"]},
    )

    detail = api.ok("GET", article_path, token=viewer_token)
    assert detail["status"] == "REJECTED"
    assert detail["view_count"] == 1
    assert [v["version_number"] for v in detail["versions"]] == [2, 1]
    assert len(detail["approvals"]) == 2
    assert detail["comments"][0]["replies"][0]["content"] == "thanks"
    assert api.ok("GET", article_path, token=viewer_token)["view_count"] == 2

    articles, pagination = api.page("GET", f"{base}/articles", token=viewer_token, params={"status": "REJECTED"})
    assert [a["id"] for a in articles] == [article["id"]]
    assert pagination == {"page": 1, "limit": 10, "total": 1, "pages": 1}

    approvals, _ = api.page("GET", f"{base}/approvals", token=viewer_token, params={"status": "APPROVED"})
    assert len(approvals) == 1

    count = api.ok("GET", "/api/notifications/unread-count", token=editor_token)["count"]
    assert count == 3
    notifications, _ = api.page("GET", "/api/notifications", token=editor_token, params={"type": "APPROVAL"})
    assert len(notifications) == 2
    assert api.ok("POST", "/api/notifications/mark-all-read", token=editor_token)["updated"] == 3
    assert api.ok("GET", "/api/notifications/unread-count", token=editor_token)["count"] == 0

    # 查看者未产生任何通知，不能标记作者的通知。
    api.fail(
        "POST",
        "/api/notifications/mark-read",
        token=viewer_token,
        expected_status=404,
        json={"notification_ids": [notifications[0]["id"]]},
    )

    tags, _ = api.page("GET", f"{base}/tags", token=viewer_token)
    ops = next(tag for tag in tags if tag["name"] == "ops")
    assert ops["article_count"] == 1
    in_use = api.fail("DELETE", f"{base}/tags/{ops['id']}", token=editor_token, expected_status=400)
    assert in_use["error"]["code"] == "TAG_IN_USE"


def test_archived_workspace_rejects_owner(api: Api):
    owner_token, _ = api.register("Owner")
    workspace = api.ok("POST", "/api/workspaces", token=owner_token, expected_status=201, json={"name": "Temp"})
    base = f"/api/workspaces/{workspace['id']}"

    api.ok("DELETE", base, token=owner_token)

    archived = api.fail("GET", f"{base}/articles", token=owner_token, expected_status=403)
    assert archived["message"] == "This workspace has been archived"
    listed, pagination = api.page("GET", "/api/workspaces", token=owner_token)
    assert listed == []
    assert pagination["total"] == 0


def test_unknown_workspace_is_forbidden(api: Api):
    token, _ = api.register("Erin")

    denied = api.fail("GET", f"/api/workspaces/{uuid4()}/articles", token=token, expected_status=403)
    assert denied["error"]["code"] == "NOT_A_MEMBER"


def test_admin_user_management(api: Api, session_factory: sessionmaker):
    admin_token, admin_id = api.register("Admin")
    user_token, user_id = api.register("Plain")
    api.fail("GET", "/api/admin/users", token=user_token, expected_status=403)

    with session_factory() as db:
        db.get(User, UUID(admin_id)).global_role = GlobalRole.ADMIN
        db.commit()

    users, pagination = api.page("GET", "/api/admin/users", token=admin_token, params={"search": "plain"})
    assert [u["id"] for u in users] == [user_id]
    assert pagination["total"] == 1

    api.fail("PATCH", f"/api/admin/users/{admin_id}/status", token=admin_token, expected_status=400, json={"is_active": False})
    api.fail(
        "PATCH",
        f"/api/admin/users/{user_id}/role",
        token=admin_token,
        expected_status=403,
        json={"global_role": "ADMIN"},
    )

    deactivated = api.ok("PATCH", f"/api/admin/users/{user_id}/status", token=admin_token, json={"is_active": False})
    assert deactivated["is_active"] is False
    denied = api.fail("GET", "/api/auth/me", token=user_token, expected_status=401)
    assert denied["message"] == "Your account has been deactivated"


def test_user_profile_and_account_deletion(api: Api):
    token, _ = api.register("Frank")

    profile = api.ok("PUT", "/api/users/profile", token=token, json={"name": "Franklin", "avatar": "https://img/f.png"})
    assert profile["name"] == "Franklin"

    api.fail(
        "POST",
        "/api/users/change-password",
        token=token,
        expected_status=400,
        json={"current_password": "wrong-password", "new_password": "NewPassw0rd!"},
    )
    api.ok(
        "POST",
        "/api/users/change-password",
        token=token,
        json={"current_password": PASSWORD, "new_password": "NewPassw0rd!"},
    )

    api.ok("POST", "/api/workspaces", token=token, expected_status=201, json={"name": "Mine"})
    workspaces = api.ok("GET", "/api/users/workspaces", token=token)
    assert [w["role"] for w in workspaces] == ["OWNER"]

    blocked = api.fail("DELETE", "/api/users", token=token, expected_status=409)
    assert blocked["error"]["code"] == "USER_HAS_CONTENT"

    other_token, _ = api.register("Gina")
    api.ok("DELETE", "/api/users", token=other_token)
    gone = api.fail("GET", "/api/auth/me", token=other_token, expected_status=401)
    assert gone["message"] == "The user belonging to this token no longer exists"


def test_every_route_is_registered():
    paths = set(app.openapi()["paths"])

    for expected in (
        "/health",
        "/api/auth/login",
        "/api/workspaces/{workspace_id}/articles/{article_id}/submit-review",
        "/api/workspaces/{workspace_id}/articles/{article_id}/versions/{version_number}",
        "/api/workspaces/{workspace_id}/approvals/{approval_id}",
        "/api/workspaces/{workspace_id}/articles/{article_id}/comments/{comment_id}",
        "/api/workspaces/{workspace_id}/tags/{tag_id}",
        "/api/notifications/{notification_id}",
        "/api/admin/users/{user_id}/role",
    ):
        assert expected in paths, expected
