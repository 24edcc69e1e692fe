from pydantic import BaseModel, Field, HttpUrl, field_validator, field_serializer, ConfigDict
from typing import Optional, List, Literal
from datetime import date, datetime
from decimal import Decimal

from laptop_api.domains.laptops.entities import Laptop, Brand, Image

Category = Literal["ULTRABOOK", "GAMING", "BUSINESS"]


class BrandSchema(BaseModel):
    """Схема марки"""
    name: str = Field(..., min_length=1, max_length=40, pattern=r"^\w.*")
    series: Optional[str] = Field(None, max_length=40)

    def to_entity(self) -> Brand:
        return Brand(name=self.name, series=self.series)


class ImageSchema(BaseModel):
    """Схема изображения"""
    caption: str = Field(..., min_length=1, max_length=32)
    content_type: Optional[str] = Field(None, max_length=16)

    def to_entity(self) -> Image:
        return Image(caption=self.caption, content_type=self.content_type)


class LaptopBase(BaseModel):
    """Поля Laptop без марки и изображений"""
    model_number: str = Field(..., min_length=1, max_length=40)
    category: Optional[Category] = None
    price: Decimal = Field(..., ge=0, max_digits=8, decimal_places=2)
    discount: Optional[Decimal] = Field(None, ge=0, lt=1, max_digits=4)
    available: Optional[bool] = None
    release_date: Optional[date] = None
    homepage: Optional[HttpUrl] = None
    features: Optional[List[str]] = None

    @field_validator('features')
    @classmethod
    def validate_features(cls, v):
        if v is not None and len(set(v)) != len(v):
            raise ValueError('Features must be unique')
        return v

    def _laptop_fields(self) -> dict:
        return {
            "model_number": self.model_number,
            "category": self.category,
            "price": self.price,
            "discount": self.discount,
            "available": self.available,
            "release_date": self.release_date,
            "homepage": str(self.homepage) if self.homepage is not None else None,
            "features": self.features,
        }


class LaptopCreate(LaptopBase):
    """Схема для создания Laptop вместе с маркой и изображениями"""
    brand: BrandSchema
    images: Optional[List[ImageSchema]] = None

    def to_entity(self) -> Laptop:
        fields = self._laptop_fields()
        if fields["discount"] is None:
            fields["discount"] = Decimal("0")
        return Laptop(
            **fields,
            brand=self.brand.to_entity(),
            images=[image.to_entity() for image in self.images or []],
        )


class LaptopUpdate(LaptopBase):
    """Схема для обновления: поля, равные None, не изменяются"""

    def to_entity(self) -> Laptop:
        return Laptop(**self._laptop_fields())


class BrandResponse(BaseModel):
    name: str
    series: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ImageResponse(BaseModel):
    caption: str
    content_type: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class LaptopResponse(BaseModel):
    """Схема для ответа с данными Laptop"""
    id: int
    version: int
    model_number: str
    category: Optional[str] = None
    price: Decimal
    discount: Optional[Decimal] = None
    available: Optional[bool] = None
    release_date: Optional[date] = None
    homepage: Optional[str] = None
    features: List[str] = []
    brand: Optional[BrandResponse] = None
    images: Optional[List[ImageResponse]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_serializer('price', 'discount')
    def serialize_decimal(self, v: Optional[Decimal]):
        return float(v) if v is not None else None


class PageMeta(BaseModel):
    size: int
    number: int
    total_elements: int
    total_pages: int


class LaptopPage(BaseModel):
    """Страница результатов поиска"""
    content: List[LaptopResponse]
    page: PageMeta
