# tests/test_policy.py
"""
Unit tests for path classification and the routing decision table.

Pure functions only: no app, no database.
"""
from __future__ import annotations

import itertools

import pytest

from portal.auth.identity import Identity
from portal.auth.policy import PASS, PathClass, classify, decide, normalize_path

ANON = Identity.unauthenticated()
NO_ROLE = Identity.from_session("u-none")
SEEKER = Identity.from_session("u-seeker", role="job_seeker")
EMPLOYER = Identity.from_session("u-employer", role="employer")


# ---------------------------------------------------------------------------
# classify()
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "path, expected",
    [
        ("/dashboard", PathClass.DASHBOARD),
        ("/dashboard/", PathClass.DASHBOARD),
        ("/dashboard/employer/reports", PathClass.DASHBOARD),
        ("/auth", PathClass.AUTH),
        ("/auth/signin", PathClass.AUTH),
        ("/auth/signup", PathClass.AUTH),
        ("/setup", PathClass.SETUP),
        ("/", PathClass.PUBLIC),
        ("/jobs", PathClass.PUBLIC),
        ("/api/auth/register", PathClass.PUBLIC),
        ("", PathClass.PUBLIC),
    ],
)
def test_classify(path, expected):
    assert classify(path) is expected


@pytest.mark.parametrize("path", ["/authors", "/dashboards", "/setup-guide", "/dashboard-tips"])
def test_classify_prefix_match_respects_segments(path):
    assert classify(path) is PathClass.PUBLIC


def test_normalize_path_strips_trailing_slash_but_keeps_root():
    assert normalize_path("/dashboard/") == "/dashboard"
    assert normalize_path("/") == "/"
    assert normalize_path("") == "/"


# ---------------------------------------------------------------------------
# decide(): one test per table row
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("path", ["/dashboard", "/dashboard/employer", "/dashboard/job-seeker/applications"])
def test_anonymous_on_dashboard_redirects_to_sign_in(path):
    assert decide(ANON, path).redirect_to == "/auth/signin"


@pytest.mark.parametrize("path", ["/auth/signin", "/auth/signup", "/", "/jobs"])
def test_anonymous_on_auth_or_public_passes(path):
    assert decide(ANON, path) == PASS


def test_no_role_on_setup_passes():
    assert decide(NO_ROLE, "/setup").passes


@pytest.mark.parametrize("path", ["/auth/signin", "/dashboard", "/dashboard/job-seeker", "/dashboard/employer/x"])
def test_no_role_on_auth_or_dashboard_redirects_to_setup(path):
    assert decide(NO_ROLE, path).redirect_to == "/setup"


def test_no_role_on_public_passes():
    assert decide(NO_ROLE, "/jobs").passes


@pytest.mark.parametrize(
    "identity, expected",
    [(SEEKER, "/dashboard/job-seeker"), (EMPLOYER, "/dashboard/employer")],
)
def test_role_on_auth_redirects_to_own_dashboard(identity, expected):
    assert decide(identity, "/auth/signin").redirect_to == expected
    assert decide(identity, "/auth/signup").redirect_to == expected


@pytest.mark.parametrize(
    "identity, expected",
    [(SEEKER, "/dashboard/job-seeker"), (EMPLOYER, "/dashboard/employer")],
)
def test_role_on_bare_dashboard_redirects_to_own_dashboard(identity, expected):
    assert decide(identity, "/dashboard").redirect_to == expected
    assert decide(identity, "/dashboard/").redirect_to == expected


def test_job_seeker_on_employer_dashboard_redirects():
    assert decide(SEEKER, "/dashboard/employer").redirect_to == "/dashboard/job-seeker"
    assert decide(SEEKER, "/dashboard/employer/anything").redirect_to == "/dashboard/job-seeker"


def test_employer_on_job_seeker_dashboard_redirects():
    assert decide(EMPLOYER, "/dashboard/job-seeker").redirect_to == "/dashboard/employer"
    assert decide(EMPLOYER, "/dashboard/job-seeker/saved").redirect_to == "/dashboard/employer"


@pytest.mark.parametrize(
    "identity, path",
    [
        (SEEKER, "/dashboard/job-seeker"),
        (SEEKER, "/dashboard/job-seeker/applications"),
        (EMPLOYER, "/dashboard/employer/reports"),
        (EMPLOYER, "/"),
        (SEEKER, "/jobs"),
    ],
)
def test_role_on_matching_dashboard_or_public_passes(identity, path):
    assert decide(identity, path).passes


# ---------------------------------------------------------------------------
# Decisions beyond the base table
# ---------------------------------------------------------------------------


def test_anonymous_on_setup_redirects_to_sign_in():
    assert decide(ANON, "/setup").redirect_to == "/auth/signin"


def test_role_on_setup_redirects_to_own_dashboard():
    assert decide(EMPLOYER, "/setup").redirect_to == "/dashboard/employer"


def test_role_on_unrelated_dashboard_subpath_passes():
    assert decide(SEEKER, "/dashboard/settings").passes


def test_setup_redirect_takes_precedence_over_segment_mismatch():
    # No role at all: /setup, not either role's dashboard.
    assert decide(NO_ROLE, "/dashboard/employer/reports").redirect_to == "/setup"


def test_unknown_role_claim_counts_as_no_role():
    identity = Identity.from_cognito("sub-1", role="admin")
    assert identity.role is None
    assert decide(identity, "/dashboard/employer").redirect_to == "/setup"


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------

_IDENTITIES = [ANON, NO_ROLE, SEEKER, EMPLOYER]
_PATHS = [
    "/",
    "/jobs",
    "/auth/signin",
    "/auth/signup",
    "/setup",
    "/dashboard",
    "/dashboard/job-seeker",
    "/dashboard/job-seeker/a",
    "/dashboard/employer",
    "/dashboard/employer/b",
    "/dashboard/other",
]


@pytest.mark.parametrize("identity, path", list(itertools.product(_IDENTITIES, _PATHS)))
def test_redirect_target_is_a_fixed_point(identity, path):
    """Following a redirect never redirects again for the same identity."""
    decision = decide(identity, path)
    if decision.passes:
        return
    assert decide(identity, decision.redirect_to).passes


def test_decide_is_deterministic():
    for identity, path in itertools.product(_IDENTITIES, _PATHS):
        assert decide(identity, path) == decide(identity, path)
