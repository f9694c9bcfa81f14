"""
Pydantic Schemas for the AS Colour catalog
Field names follow the upstream JSON (camelCase) so records round-trip unchanged.
"""
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional


class Product(BaseModel):
    styleCode: str = Field(..., description="Unique style code")
    styleName: str = Field("", description="Display name")
    description: Optional[str] = None
    shortDescription: Optional[str] = None
    printingTechniques: Optional[str] = None
    fabricWeight: Optional[str] = None
    composition: Optional[str] = None
    webId: Optional[int] = None
    productType: Optional[str] = Field(None, description="Category, e.g. T-Shirts")
    productWeight: Optional[str] = Field(None, description="Weight class, e.g. Mid Weight")
    coreRange: Optional[str] = Field(None, description="Collection / series")
    fit: Optional[str] = None
    gender: Optional[str] = None
    productSpecURL: Optional[str] = None
    sizeGuideURL: Optional[str] = None
    websiteURL: Optional[str] = None
    updatedAt: Optional[str] = None

    class Config:
        extra = 'allow'
        frozen = True


class ProductImage(BaseModel):
    styleCode: Optional[str] = None
    imageType: Optional[str] = None
    urlStandard: Optional[str] = None
    urlThumbnail: Optional[str] = None
    urlTiny: Optional[str] = None
    urlZoom: Optional[str] = None

    class Config:
        extra = 'allow'


class ProductVariant(BaseModel):
    styleCode: Optional[str] = None
    sku: Optional[str] = None
    colour: Optional[str] = None
    size: Optional[str] = None

    class Config:
        extra = 'allow'


class Colour(BaseModel):
    colour: str
    hex: str
    hex2: Optional[str] = None

    class Config:
        extra = 'allow'


class InventoryItem(BaseModel):
    sku: str
    size: Optional[str] = None
    color: Optional[str] = None
    quantity: Optional[int] = None
    available: Optional[bool] = None

    class Config:
        extra = 'allow'


class ApiEnvelope(BaseModel):
    """Envelope returned by list endpoints: { data, success?, message? }"""
    data: Optional[Any] = None
    success: Optional[bool] = None
    message: Optional[str] = None

    class Config:
        extra = 'allow'


class InventoryResponse(BaseModel):
    data: Any
    success: bool = True


class ProxyErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None


class GenerateImageResponse(BaseModel):
    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None
