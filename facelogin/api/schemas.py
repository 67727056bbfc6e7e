"""Request and response bodies of the face login API."""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, Field


class VerifyRequest(BaseModel):
    image_base64: str | None = Field(
        default=None,
        validation_alias=AliasChoices("imageBase64", "imageBase64OrDataUrl", "image_base64"),
    )


class VerifyResponse(BaseModel):
    success: bool = True
    message: str
    similarity: int
    email: str
    userId: str
    accessToken: str
    refreshToken: str


class EnrollRequest(BaseModel):
    user_id: str = Field(
        min_length=1,
        validation_alias=AliasChoices("userId", "user_id"),
    )
    image_base64: str | None = Field(
        default=None,
        validation_alias=AliasChoices("imageBase64", "imageBase64OrDataUrl", "image_base64"),
    )


class EnrollResponse(BaseModel):
    success: bool = True
    message: str
    userId: str
    descriptorId: int


class DisableRequest(BaseModel):
    user_id: str = Field(
        min_length=1,
        validation_alias=AliasChoices("userId", "user_id"),
    )


class DisableResponse(BaseModel):
    success: bool = True
    userId: str
    deactivated: int


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    code: str
