from laptop_api.db.repositories.laptop_repository import LaptopRepository, LaptopFileRepository

__all__ = [
    "LaptopRepository",
    "LaptopFileRepository"
]
