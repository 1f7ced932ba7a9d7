from urllib.parse import parse_qs

from fastapi import APIRouter, Depends, Request

from app.clinica.core.error_catalog import AppError
from app.clinica.db.session import get_db
from app.clinica.repos.users import UserRepository
from app.clinica.schemas.auth import LoginRequest, OAuth2TokenResponse, TokenResponse
from app.clinica.services.audit import AuditEventPayload, AuditService
from app.clinica.services.auth import AuthService

router = APIRouter()


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Login (JSON)",
    description="Login with username or email; the token carries the user's role.",
)
async def login(request: Request, payload: LoginRequest, db=Depends(get_db)):
    identifier = payload.email or payload.username_or_email
    trace_id = getattr(request.state, "trace_id", "")
    try:
        user, token = AuthService(db).login(identifier, payload.password)
    except AppError as exc:
        candidate = UserRepository(db).get_by_username_or_email(identifier)
        if candidate is not None:
            AuditService(db).record_event(
                AuditEventPayload(
                    user_id=str(candidate.id),
                    trace_id=trace_id or None,
                    actor=identifier,
                    action="auth.login.failed",
                    entity_type="user",
                    entity_id=str(candidate.id),
                    before=None,
                    after=None,
                    metadata={"error_code": exc.error.code},
                    result="failure",
                )
            )
        raise

    AuditService(db).record_event(
        AuditEventPayload(
            user_id=str(user.id),
            trace_id=trace_id or None,
            actor=user.username,
            action="auth.login",
            entity_type="user",
            entity_id=str(user.id),
            before=None,
            after=None,
            metadata=None,
            result="success",
        )
    )
    return TokenResponse(access_token=token, role=user.role, trace_id=trace_id)


@router.post(
    "/token",
    response_model=OAuth2TokenResponse,
    summary="OAuth2 Token (Swagger/Auth)",
    description="OAuth2 password flow endpoint using form-data username/password.",
)
async def oauth2_token(request: Request, db=Depends(get_db)):
    raw_body = (await request.body()).decode()
    form_data = parse_qs(raw_body)
    username = (form_data.get("username") or [""])[0]
    password = (form_data.get("password") or [""])[0]

    _, token = AuthService(db).login(username, password)
    return OAuth2TokenResponse(access_token=token)
