from laptop_api.db.models.laptop import LaptopModel, BrandModel, ImageModel, LaptopFileModel

__all__ = [
    "LaptopModel",
    "BrandModel",
    "ImageModel",
    "LaptopFileModel"
]
