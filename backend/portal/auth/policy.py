# portal/auth/policy.py
"""
Request-time routing policy.

Pure functions only: ``classify`` buckets a path, ``decide`` maps
(identity, path) to either "pass through" or "redirect to X". The middleware
in ``portal.middleware.access`` is a thin adapter around ``decide``.

Decision table (first matching row wins):

    identity  role   path class                      outcome
    --------  -----  ------------------------------  ----------------------------
    no        -      dashboard, setup                redirect -> /auth/signin
    no        -      auth, public                    pass
    yes       no     setup                           pass
    yes       no     auth, dashboard                 redirect -> /setup
    yes       no     public                          pass
    yes       yes    auth, setup                     redirect -> role dashboard
    yes       yes    /dashboard (bare)               redirect -> role dashboard
    yes       yes    /dashboard/employer/* (seeker)  redirect -> /dashboard/job-seeker
    yes       yes    /dashboard/job-seeker/* (empl)  redirect -> /dashboard/employer
    yes       yes    other dashboard, public         pass
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from portal.auth.identity import Identity
from portal.auth.roles import DASHBOARD_ROOTS, Role, dashboard_root

SIGN_IN_PATH = "/auth/signin"
SETUP_PATH = "/setup"
DASHBOARD_PATH = "/dashboard"
AUTH_PREFIX = "/auth"


class PathClass(str, Enum):
    PUBLIC = "public"
    AUTH = "auth"
    DASHBOARD = "dashboard"
    SETUP = "setup"


@dataclass(frozen=True)
class Decision:
    redirect_to: str | None = None

    @property
    def passes(self) -> bool:
        return self.redirect_to is None


PASS = Decision()


def redirect(location: str) -> Decision:
    return Decision(redirect_to=location)


def normalize_path(path: str) -> str:
    path = (path or "/").rstrip("/")
    return path or "/"


def under(path: str, prefix: str) -> bool:
    """Segment-aware prefix match: /auth matches /auth and /auth/x, not /authors."""
    return path == prefix or path.startswith(prefix + "/")


def classify(path: str) -> PathClass:
    path = normalize_path(path)
    if under(path, DASHBOARD_PATH):
        return PathClass.DASHBOARD
    if under(path, AUTH_PREFIX):
        return PathClass.AUTH
    if under(path, SETUP_PATH):
        return PathClass.SETUP
    return PathClass.PUBLIC


def _decide_dashboard(role: Role, path: str) -> Decision:
    if path == DASHBOARD_PATH:
        return redirect(dashboard_root(role))

    # A role hitting the other role's segment goes to its own dashboard root.
    for owner, segment in DASHBOARD_ROOTS.items():
        if under(path, segment) and owner is not role:
            return redirect(dashboard_root(role))

    return PASS


def decide(identity: Identity, path: str) -> Decision:
    path = normalize_path(path)
    path_class = classify(path)

    if not identity.is_authenticated:
        if path_class in (PathClass.DASHBOARD, PathClass.SETUP):
            return redirect(SIGN_IN_PATH)
        return PASS

    if not identity.has_role:
        if path_class in (PathClass.AUTH, PathClass.DASHBOARD):
            return redirect(SETUP_PATH)
        return PASS

    role = identity.role

    if path_class in (PathClass.AUTH, PathClass.SETUP):
        return redirect(dashboard_root(role))

    if path_class is PathClass.DASHBOARD:
        return _decide_dashboard(role, path)

    return PASS
