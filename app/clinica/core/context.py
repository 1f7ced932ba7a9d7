from dataclasses import dataclass

from fastapi import Request


@dataclass(frozen=True)
class RequestContext:
    user_id: str | None
    username: str | None
    role: str | None
    trace_id: str


def get_request_context(request: Request) -> RequestContext:
    context = getattr(request.state, "context", None)
    if isinstance(context, RequestContext):
        return context
    return RequestContext(
        user_id=getattr(request.state, "user_id", None),
        username=getattr(request.state, "username", None),
        role=getattr(request.state, "role", None),
        trace_id=getattr(request.state, "trace_id", ""),
    )
