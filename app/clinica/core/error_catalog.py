from dataclasses import dataclass
from fastapi import status


@dataclass(frozen=True)
class ErrorDefinition:
    code: str
    message: str
    status_code: int


class ErrorCatalog:
    INVALID_TOKEN = ErrorDefinition("INVALID_TOKEN", "Invalid token", status.HTTP_401_UNAUTHORIZED)
    INVALID_CREDENTIALS = ErrorDefinition(
        "INVALID_CREDENTIALS",
        "Invalid credentials",
        status.HTTP_401_UNAUTHORIZED,
    )
    USER_INACTIVE = ErrorDefinition(
        "USER_INACTIVE",
        "User is inactive",
        status.HTTP_403_FORBIDDEN,
    )
    PERMISSION_DENIED = ErrorDefinition(
        "PERMISSION_DENIED",
        "Permission denied",
        status.HTTP_403_FORBIDDEN,
    )
    ADMIN_NOT_FOUND = ErrorDefinition(
        "ADMIN_NOT_FOUND",
        "No active administrator found",
        status.HTTP_404_NOT_FOUND,
    )
    ADMIN_CONFIRMATION_FAILED = ErrorDefinition(
        "ADMIN_CONFIRMATION_FAILED",
        "Administrator password is incorrect",
        status.HTTP_401_UNAUTHORIZED,
    )
    INVALID_AMOUNT = ErrorDefinition(
        "INVALID_AMOUNT",
        "Amount must be a number greater than or equal to 0",
        status.HTTP_422_UNPROCESSABLE_ENTITY,
    )
    DUPLICATE_OPENING_BALANCE = ErrorDefinition(
        "DUPLICATE_OPENING_BALANCE",
        "Opening balance already recorded for this day",
        status.HTTP_409_CONFLICT,
    )
    DUPLICATE_CUT = ErrorDefinition(
        "DUPLICATE_CUT",
        "Cash cut already recorded for this time",
        status.HTTP_409_CONFLICT,
    )
    MISSING_OPENING_BALANCE = ErrorDefinition(
        "MISSING_OPENING_BALANCE",
        "Opening balance for the day was not found",
        status.HTTP_409_CONFLICT,
    )
    LEDGER_CONFLICT = ErrorDefinition(
        "LEDGER_CONFLICT",
        "Cash ledger changed while the cut was being recorded, please retry",
        status.HTTP_409_CONFLICT,
    )
    INVALID_CUT_TIME = ErrorDefinition(
        "INVALID_CUT_TIME",
        "Invalid cash cut time",
        status.HTTP_422_UNPROCESSABLE_ENTITY,
    )
    INVALID_CUT_SCHEDULE = ErrorDefinition(
        "INVALID_CUT_SCHEDULE",
        "Invalid cash cut schedule",
        status.HTTP_422_UNPROCESSABLE_ENTITY,
    )
    DB_UNAVAILABLE = ErrorDefinition(
        "DB_UNAVAILABLE",
        "Database unavailable",
        status.HTTP_503_SERVICE_UNAVAILABLE,
    )
    LOCK_TIMEOUT = ErrorDefinition(
        "LOCK_TIMEOUT",
        "Lock wait timeout",
        status.HTTP_409_CONFLICT,
    )
    VALIDATION_ERROR = ErrorDefinition(
        "VALIDATION_ERROR",
        "Validation error",
        status.HTTP_422_UNPROCESSABLE_ENTITY,
    )
    INTERNAL_ERROR = ErrorDefinition(
        "INTERNAL_ERROR",
        "Internal server error",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


class AppError(Exception):
    def __init__(self, error: ErrorDefinition, details: object | None = None):
        self.error = error
        self.details = details
        super().__init__(error.message)
