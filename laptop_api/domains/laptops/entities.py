from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

CATEGORIES = ("ULTRABOOK", "GAMING", "BUSINESS")


@dataclass
class Brand:
    name: str
    series: Optional[str] = None
    id: Optional[int] = None


@dataclass
class Image:
    caption: str
    content_type: Optional[str] = None
    id: Optional[int] = None


@dataclass
class LaptopFile:
    filename: str
    mimetype: Optional[str]
    data: bytes
    laptop_id: int
    id: Optional[int] = None

    def __repr__(self) -> str:
        return f"LaptopFile(id={self.id}, filename={self.filename}, mimetype={self.mimetype})"


@dataclass
class Laptop:
    """Агрегат Laptop: владеет Brand и Image без обратных ссылок.

    Поля со значением None при обновлении означают "не изменять".
    """
    model_number: Optional[str] = None
    category: Optional[str] = None
    price: Optional[Decimal] = None
    discount: Optional[Decimal] = None
    available: Optional[bool] = None
    release_date: Optional[date] = None
    homepage: Optional[str] = None
    features: Optional[List[str]] = None
    brand: Optional[Brand] = None
    images: Optional[List[Image]] = None
    id: Optional[int] = None
    version: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __repr__(self) -> str:
        return (
            f"Laptop(id={self.id}, version={self.version}, model_number={self.model_number}, "
            f"category={self.category}, price={self.price})"
        )
