from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from carservice.utils.validation_helpers import require_text


class SignupRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    username: str
    password: str
    confirm_password: str = Field(alias="confirmPassword")
    mobile_number: str = Field(alias="mobileNumber")

    @field_validator("username", "password", "confirm_password", "mobile_number")
    @classmethod
    def check_not_blank(cls, value):
        return require_text(value)


class SigninRequest(BaseModel):
    username: str
    password: str

    @field_validator("username", "password")
    @classmethod
    def check_not_blank(cls, value):
        return require_text(value)


class TokenResponse(BaseModel):
    token: str
    username: str


class MessageResponse(BaseModel):
    message: str


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    mobile_number: str = Field(serialization_alias="mobileNumber")
    created_at: datetime = Field(serialization_alias="createdAt")
