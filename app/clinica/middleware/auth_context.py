from jose import JWTError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from app.clinica.core.security import decode_token


class AuthContextMiddleware(BaseHTTPMiddleware):
    """Expose the caller's identity on ``request.state`` for logging.

    Decoding here is best effort: an invalid token leaves the fields empty and
    the route dependencies still reject the request.
    """

    async def dispatch(self, request: Request, call_next):
        request.state.user_id = None
        request.state.username = None
        request.state.role = None

        auth_header = request.headers.get("Authorization")
        if auth_header and auth_header.lower().startswith("bearer "):
            token = auth_header.split(" ", 1)[1]
            try:
                payload = decode_token(token)
            except JWTError:
                payload = {}
            request.state.user_id = payload.get("sub")
            request.state.username = payload.get("username")
            request.state.role = payload.get("role")

        return await call_next(request)
