"""FastAPI dependencies resolving the caller's session context."""
import logging
from typing import Optional

from fastapi import Header, HTTPException

from shared.adapters.auth_client import AuthClientError, decode_access_token
from shared.domain.exceptions import PortalError
from shared.domain.session import SessionContext
from shared.entrypoints.errors import to_http_exception
from directory import views as directory_views
from directory.service_layer.unit_of_work import SqlAlchemyUnitOfWork

logger = logging.getLogger(__name__)


def get_session_context(
    authorization: Optional[str] = Header(None),
    x_impersonate_user: Optional[str] = Header(None),
) -> SessionContext:
    """
    Resolve the bearer token to a session context.

    Lab staff may send ``X-Impersonate-User`` to view the portal as that
    clinic user; the real identity stays on the context.
    """
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail="Not authenticated")

    token = authorization.split(" ", 1)[1].strip()
    try:
        claims = decode_access_token(token)
    except AuthClientError as e:
        raise HTTPException(status_code=401, detail=str(e))

    try:
        return directory_views.load_session(claims["sub"], SqlAlchemyUnitOfWork(), x_impersonate_user)
    except PortalError as e:
        raise to_http_exception(e)
