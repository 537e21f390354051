from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field
from typing import Optional


class VendorRegister(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    vendor_name: str = Field(..., min_length=1, alias="vendorName")
    email: EmailStr
    phone_number: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("phoneNumber", "phone", "phone_number"),
    )
    password: str = Field(..., min_length=1)
    business_address: str = Field(..., min_length=1, alias="businessAddress")

    region: Optional[str] = None
    city: Optional[str] = None
    business_license: Optional[str] = Field(None, alias="businessLicense")
    tax_id: Optional[str] = Field(None, alias="taxId")


class VendorProfileUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    vendor_name: Optional[str] = Field(None, alias="vendorName")
    phone_number: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("phoneNumber", "phone", "phone_number"),
    )
    business_address: Optional[str] = Field(None, alias="businessAddress")
    region: Optional[str] = None
    city: Optional[str] = None
    business_license: Optional[str] = Field(None, alias="businessLicense")
    tax_id: Optional[str] = Field(None, alias="taxId")
