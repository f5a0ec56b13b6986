"""
End-to-end routing through the access middleware.

Identities come from a fake provider (see conftest.client_as) except where the
session provider itself is under test.
"""
from __future__ import annotations

import pytest

from portal.auth.identity import Identity
from portal.core.errors import IdentityProviderError, StorageUnavailableError


def _location(res) -> str:
    return res.headers["location"]


@pytest.mark.parametrize(
    "identity, path, expected",
    [
        (Identity.unauthenticated(), "/dashboard/employer", "http://testserver/auth/signin"),
        (Identity.from_session("u1"), "/dashboard/job-seeker", "http://testserver/setup"),
        (
            Identity.from_session("u2", role="job_seeker"),
            "/dashboard/employer/anything",
            "http://testserver/dashboard/job-seeker",
        ),
        (Identity.from_session("u3", role="employer"), "/auth/signin", "http://testserver/dashboard/employer"),
        (Identity.from_session("u3", role="employer"), "/dashboard", "http://testserver/dashboard/employer"),
    ],
)
def test_redirects(client_as, identity, path, expected):
    with client_as(identity) as c:
        res = c.get(path, follow_redirects=False)
    assert res.status_code == 307
    assert _location(res) == expected


def test_matching_dashboard_passes_through(client_as):
    with client_as(Identity.from_session("u3", role="employer")) as c:
        res = c.get("/dashboard/employer/reports", follow_redirects=False)
    assert res.status_code == 200
    assert res.json() == {"page": "dashboard/employer", "role": "employer"}


def test_no_role_reaches_setup(client_as):
    with client_as(Identity.from_session("u1")) as c:
        res = c.get("/setup", follow_redirects=False)
    assert res.status_code == 200
    assert res.json()["page"] == "setup"


def test_anonymous_reaches_public_and_auth_pages(client_as):
    with client_as(Identity.unauthenticated()) as c:
        assert c.get("/", follow_redirects=False).status_code == 200
        assert c.get("/jobs", follow_redirects=False).status_code == 200
        assert c.get("/auth/signup", follow_redirects=False).status_code == 200


def test_redirect_drops_query_string(client_as):
    with client_as(Identity.unauthenticated()) as c:
        res = c.get("/dashboard/job-seeker?tab=saved", follow_redirects=False)
    assert _location(res) == "http://testserver/auth/signin"


def test_following_redirect_lands_on_dashboard(client_as):
    with client_as(Identity.from_session("u2", role="job_seeker")) as c:
        res = c.get("/auth/signin")
    assert res.status_code == 200
    assert res.json()["page"] == "dashboard/job-seeker"


def test_bypass_paths_skip_identity_lookup(client_as):
    with client_as(Identity.unauthenticated(), error=StorageUnavailableError()) as c:
        assert c.get("/health").status_code == 200


def test_options_preflight_is_not_redirected(client_as):
    with client_as(Identity.unauthenticated()) as c:
        res = c.options(
            "/dashboard/employer",
            headers={"Origin": "http://localhost:3000", "Access-Control-Request-Method": "GET"},
        )
    assert res.status_code == 200


@pytest.mark.parametrize("error", [StorageUnavailableError(), IdentityProviderError()])
def test_provider_failure_is_generic_500(client_as, error):
    with client_as(Identity.unauthenticated(), error=error) as c:
        res = c.get("/dashboard/employer", follow_redirects=False)
    assert res.status_code == 500
    assert res.json() == {"error": "INTERNAL_ERROR", "message": "Internal server error"}


# ---------------------------------------------------------------------------
# Session provider: role is re-read on every request
# ---------------------------------------------------------------------------


def test_session_role_change_applies_on_next_request(client, make_user, login, db_session):
    from portal.models.user import User

    user = make_user("grace@example.com", role="job_seeker")
    login("grace@example.com")

    res = client.get("/dashboard", follow_redirects=False)
    assert _location(res) == "http://testserver/dashboard/job-seeker"

    stored = db_session.get(User, user.id)
    stored.role = None
    db_session.commit()

    res = client.get("/dashboard", follow_redirects=False)
    assert _location(res) == "http://testserver/setup"

    res = client.post("/api/user/update-role", json={"role": "employer"})
    assert res.status_code == 200

    res = client.get("/dashboard", follow_redirects=False)
    assert _location(res) == "http://testserver/dashboard/employer"


def test_invalid_session_cookie_is_anonymous(client):
    client.cookies.set("portal_session", "garbage")
    res = client.get("/dashboard/employer", follow_redirects=False)
    assert _location(res) == "http://testserver/auth/signin"


# ---------------------------------------------------------------------------
# Static-looking paths
# ---------------------------------------------------------------------------


def test_anonymous_on_dashboard_file_path_redirects_to_sign_in(client_as):
    with client_as(Identity.unauthenticated()) as c:
        res = c.get("/dashboard/employer/report.csv", follow_redirects=False)
    assert res.status_code == 307
    assert _location(res) == "http://testserver/auth/signin"


def test_job_seeker_on_employer_file_path_redirects_to_own_dashboard(client_as):
    with client_as(Identity.from_session("u2", role="job_seeker")) as c:
        res = c.get("/dashboard/employer/index.html", follow_redirects=False)
    assert res.status_code == 307
    assert _location(res) == "http://testserver/dashboard/job-seeker"


@pytest.mark.parametrize("path", ["/auth/signin.html", "/setup/logo.png"])
def test_auth_and_setup_file_paths_still_resolve_identity(client_as, path):
    with client_as(Identity.unauthenticated(), error=StorageUnavailableError()) as c:
        res = c.get(path, follow_redirects=False)
    assert res.status_code == 500


def test_public_static_asset_skips_identity_lookup(client_as):
    with client_as(Identity.unauthenticated(), error=StorageUnavailableError()) as c:
        res = c.get("/favicon.ico", follow_redirects=False)
    # No route serves it, but the failing provider was never consulted.
    assert res.status_code == 404
