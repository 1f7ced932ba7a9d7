from __future__ import annotations

from dataclasses import dataclass

from app.clinica.core.context import RequestContext

CASH_VIEW = "CASH_VIEW"
CASH_OPEN = "CASH_OPEN"
CASH_CUT_SCHEDULED = "CASH_CUT_SCHEDULED"
CASH_CUT_MANUAL = "CASH_CUT_MANUAL"
SETTINGS_MANAGE = "SETTINGS_MANAGE"

PERMISSION_CATALOG = {
    CASH_VIEW: "View cash drawer state, cuts and day summary",
    CASH_OPEN: "Record the opening balance of the day",
    CASH_CUT_SCHEDULED: "Record a scheduled cash cut",
    CASH_CUT_MANUAL: "Record a manual cash cut (requires administrator confirmation)",
    SETTINGS_MANAGE: "Change the cash cut schedule",
}

ROLE_PERMISSIONS: dict[str, frozenset[str]] = {
    "ADMIN": frozenset(PERMISSION_CATALOG),
    "RECEPTIONIST": frozenset({CASH_VIEW, CASH_OPEN, CASH_CUT_SCHEDULED, CASH_CUT_MANUAL}),
    "DOCTOR": frozenset({CASH_VIEW}),
}


@dataclass(frozen=True)
class PermissionDecision:
    key: str
    allowed: bool
    source: str


class AccessControlService:
    def __init__(self, role_permissions: dict[str, frozenset[str]] | None = None):
        self.role_permissions = role_permissions if role_permissions is not None else ROLE_PERMISSIONS

    def evaluate_permission(self, permission_key: str, context: RequestContext) -> PermissionDecision:
        key = permission_key.strip()
        if key not in PERMISSION_CATALOG:
            return PermissionDecision(key=key, allowed=False, source="unknown_permission")
        role = (context.role or "").upper()
        if not role:
            return PermissionDecision(key=key, allowed=False, source="default_deny")
        if key in self.role_permissions.get(role, frozenset()):
            return PermissionDecision(key=key, allowed=True, source="role")
        return PermissionDecision(key=key, allowed=False, source="default_deny")
