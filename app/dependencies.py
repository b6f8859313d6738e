from fastapi import Request

from app.core.exceptions import AuthenticationError, AuthorizationError
from app.services.activity.visibility import Viewer


def get_viewer(request: Request) -> Viewer:
    """The authenticated contact, as set on request state by AuthMiddleware."""
    contact_id = getattr(request.state, "contact_id", None)
    if contact_id is None:
        raise AuthenticationError()
    return Viewer(contact_id=contact_id, roles=getattr(request.state, "roles", 0) or 0)


def require_chair(request: Request) -> None:
    """Dependency that restricts an endpoint to chairs and administrators."""
    if not get_viewer(request).privchair:
        raise AuthorizationError("This endpoint requires chair privileges.")
