# portal/routes/pages.py
"""
Page endpoints.

Rendering lives in the frontend; these handlers only mark which pages exist
so the access middleware has a destination to forward to.
"""
from fastapi import APIRouter, Depends

from portal.auth.identity import Identity
from portal.dependencies.auth import get_identity

router = APIRouter(tags=["pages"])


def _page(name: str, identity: Identity) -> dict:
    return {
        "page": name,
        "role": identity.role.value if identity.role else None,
    }


@router.get("/")
def home(identity: Identity = Depends(get_identity)):
    return _page("home", identity)


@router.get("/jobs")
def jobs(identity: Identity = Depends(get_identity)):
    return _page("jobs", identity)


@router.get("/auth/signin")
def sign_in(identity: Identity = Depends(get_identity)):
    return _page("auth/signin", identity)


@router.get("/auth/signup")
def sign_up(identity: Identity = Depends(get_identity)):
    return _page("auth/signup", identity)


@router.get("/setup")
def setup(identity: Identity = Depends(get_identity)):
    return _page("setup", identity)


@router.get("/dashboard")
def dashboard(identity: Identity = Depends(get_identity)):
    return _page("dashboard", identity)


@router.get("/dashboard/job-seeker")
@router.get("/dashboard/job-seeker/{rest:path}")
def job_seeker_dashboard(rest: str = "", identity: Identity = Depends(get_identity)):
    return _page("dashboard/job-seeker", identity)


@router.get("/dashboard/employer")
@router.get("/dashboard/employer/{rest:path}")
def employer_dashboard(rest: str = "", identity: Identity = Depends(get_identity)):
    return _page("dashboard/employer", identity)
