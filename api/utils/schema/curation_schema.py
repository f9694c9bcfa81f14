"""
Pydantic Schemas for curation state kept in the local persistence store
"""
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal, Optional, Union


class SavedProduct(BaseModel):
    styleCode: str
    styleName: str = ""
    productType: str = ""
    selectedColors: List[str] = Field(default_factory=list)
    timestamp: str


class PublishedProduct(SavedProduct):
    published: bool = True
    publishedAt: str


class SelectedProductRef(BaseModel):
    styleCode: str
    styleName: str = ""
    productType: str = ""
    gender: Optional[str] = None


class CreatorWorkflowData(BaseModel):
    selectedProduct: SelectedProductRef
    selectedColors: List[str] = Field(default_factory=list)
    modelImage: Optional[str] = None  # data URI or URL
    logoImage: Optional[str] = None  # data URI or URL
    prompt: Optional[str] = None


class GeneratedImageProduct(BaseModel):
    styleCode: str
    styleName: str = ""
    productType: Optional[str] = None


class GeneratedImageAsset(BaseModel):
    color: Optional[str] = None
    url: str
    key: Optional[str] = None


class GeneratedImageEntry(BaseModel):
    id: str
    image: str
    prompt: str = ""
    createdAt: str
    product: GeneratedImageProduct
    selectedColors: List[str] = Field(default_factory=list)
    source: Optional[Literal["base64", "url"]] = None
    metadata: Optional[Dict[str, Any]] = None
    assets: Optional[List[GeneratedImageAsset]] = None


# ============================================================================
# UPSTREAM GENERATION PAYLOADS
# The generator answers in one of three shapes depending on its version.
# ============================================================================

class Base64Image(BaseModel):
    """Bare base64 string body"""
    kind: Literal["base64"] = "base64"
    data: str


class AssetImages(BaseModel):
    """Object carrying per-colour S3 results in images[]"""
    kind: Literal["assets"] = "assets"
    assets: List[GeneratedImageAsset]
    metadata: Optional[Dict[str, Any]] = None
    message: Optional[str] = None


class EmbeddedBase64(BaseModel):
    """Object carrying a base64 string under data"""
    kind: Literal["embedded"] = "embedded"
    data: str
    metadata: Optional[Dict[str, Any]] = None
    message: Optional[str] = None


GenerationPayload = Union[Base64Image, AssetImages, EmbeddedBase64]
