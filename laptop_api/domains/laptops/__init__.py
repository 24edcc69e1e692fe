from laptop_api.domains.laptops.entities import Laptop, Brand, Image, LaptopFile
from laptop_api.domains.laptops.exceptions import (
    LaptopError, LaptopNotFoundError, DuplicateModelNumberError,
    VersionInvalidError, VersionOutdatedError
)
from laptop_api.domains.laptops.schemas import (
    BrandSchema, ImageSchema, LaptopCreate, LaptopUpdate, LaptopResponse,
    LaptopPage, PageMeta
)
from laptop_api.domains.laptops.services import LaptopReadService, LaptopWriteService

__all__ = [
    "Laptop", "Brand", "Image", "LaptopFile",
    "LaptopError", "LaptopNotFoundError", "DuplicateModelNumberError",
    "VersionInvalidError", "VersionOutdatedError",
    "BrandSchema", "ImageSchema", "LaptopCreate", "LaptopUpdate", "LaptopResponse",
    "LaptopPage", "PageMeta",
    "LaptopReadService", "LaptopWriteService"
]
