from pydantic import BaseModel


class CutScheduleResponse(BaseModel):
    first_cut: str
    second_cut: str
    is_default: bool = False


class CutScheduleUpdateRequest(BaseModel):
    model_config = {"json_schema_extra": {"example": {"first_cut": "14:00", "second_cut": "18:00"}}}

    first_cut: str
    second_cut: str
