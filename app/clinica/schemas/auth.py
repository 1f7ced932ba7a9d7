from pydantic import BaseModel, EmailStr, model_validator


class LoginRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {"username_or_email": "recepcion", "password": "Recepcion123"},
                {"email": "admin@clinica.com", "password": "change-me"},
            ]
        }
    }

    email: EmailStr | None = None
    username_or_email: str | None = None
    password: str

    @model_validator(mode="after")
    def ensure_identifier(self):
        if not self.email and not self.username_or_email:
            raise ValueError("email or username_or_email is required")
        return self


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: str
    trace_id: str


class OAuth2TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
