from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class ProductCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_name: str = Field(..., min_length=1, alias="productName")
    description: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    stock_quantity: int = Field(..., ge=0, alias="stockQuantity")
    category_id: str = Field(..., min_length=1, alias="categoryId")

    image_url: Optional[str] = Field(None, alias="imageURL")
    sku: Optional[str] = None
    brand: Optional[str] = None


class ProductUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_name: Optional[str] = Field(None, alias="productName")
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    stock_quantity: Optional[int] = Field(None, ge=0, alias="stockQuantity")
    category_id: Optional[str] = Field(None, alias="categoryId")
    image_url: Optional[str] = Field(None, alias="imageURL")
    sku: Optional[str] = None
    brand: Optional[str] = None
    is_active: Optional[bool] = Field(None, alias="isActive")
