from fastapi import Depends, Request
from jose import JWTError
from pydantic import ValidationError

from app.clinica.core.context import RequestContext
from app.clinica.core.error_catalog import AppError, ErrorCatalog
from app.clinica.core.security import TokenData, decode_token, oauth2_scheme
from app.clinica.db.session import get_db
from app.clinica.repos.users import UserRepository
from app.clinica.services.access_control import AccessControlService


def get_current_token_data(token: str = Depends(oauth2_scheme)) -> TokenData:
    try:
        payload = decode_token(token)
        return TokenData(**payload)
    except (JWTError, ValidationError, TypeError) as exc:
        raise AppError(ErrorCatalog.INVALID_TOKEN) from exc


def get_current_user(token_data: TokenData = Depends(get_current_token_data), db=Depends(get_db)):
    repo = UserRepository(db)
    user = repo.get_by_id(token_data.sub)
    if user is None:
        raise AppError(ErrorCatalog.INVALID_TOKEN)
    return user


def require_active_user(user=Depends(get_current_user)):
    if not user.is_active:
        raise AppError(ErrorCatalog.USER_INACTIVE)
    return user


def require_request_context(
    request: Request,
    user=Depends(require_active_user),
) -> RequestContext:
    context = RequestContext(
        user_id=str(user.id),
        username=user.username,
        role=user.role,
        trace_id=getattr(request.state, "trace_id", ""),
    )
    request.state.context = context
    return context


def require_permission(permission_key: str):
    def dependency(context: RequestContext = Depends(require_request_context)):
        decision = AccessControlService().evaluate_permission(permission_key, context)
        if not decision.allowed:
            raise AppError(ErrorCatalog.PERMISSION_DENIED, details={"permission": decision.key})
        return decision

    return dependency


__all__ = [
    "get_current_token_data",
    "get_current_user",
    "require_active_user",
    "require_request_context",
    "require_permission",
]
