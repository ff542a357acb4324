"""Session variants and the role gate applied at the boundary of each view."""

from dataclasses import dataclass

LOGIN_ROUTE = "/login"

ROLE_HOME = {
    "hr": "/hr-dashboard",
    "user": "/user-dashboard",
}


@dataclass(frozen=True)
class LoggedOut:
    pass


@dataclass(frozen=True)
class LoggedIn:
    id: str
    role: str
    name: str = ""
    email: str = ""


Session = LoggedOut | LoggedIn


def home_for(role: str) -> str:
    return ROLE_HOME.get(role, LOGIN_ROUTE)


def check_view_access(session: Session, required_role: str | None = None) -> str | None:
    """Return None if the view may render, otherwise the path to redirect to.

    ``required_role=None`` means any logged-in session is enough.
    """
    if not isinstance(session, LoggedIn):
        return LOGIN_ROUTE
    if required_role is not None and session.role != required_role:
        return home_for(session.role)
    return None
