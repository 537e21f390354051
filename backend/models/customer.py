from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field
from typing import Optional


class CustomerRegister(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    first_name: str = Field(..., min_length=1, alias="firstName")
    last_name: str = Field(..., min_length=1, alias="lastName")
    email: EmailStr
    phone_number: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("phoneNumber", "phone", "phone_number"),
    )
    password: str = Field(..., min_length=1)

    region: Optional[str] = None
    city: Optional[str] = None
    address: Optional[str] = None


class Login(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class CustomerProfileUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    phone_number: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("phoneNumber", "phone", "phone_number"),
    )
    region: Optional[str] = None
    city: Optional[str] = None
    address: Optional[str] = None


class PasswordChange(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_password: Optional[str] = Field(None, alias="currentPassword")
    new_password: Optional[str] = Field(None, alias="newPassword")
