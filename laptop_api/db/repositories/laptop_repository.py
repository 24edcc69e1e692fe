from typing import Optional, List, TYPE_CHECKING
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import Select, select, delete, exists, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError
from datetime import datetime, timezone

from laptop_api.db.models.laptop import (
    LaptopModel, BrandModel, ImageModel, LaptopFileModel
)

if TYPE_CHECKING:
    from laptop_api.domains.laptops.entities import Laptop, LaptopFile

# Поля, которые переносятся при обновлении (без марки и изображений)
UPDATABLE_FIELDS = (
    "model_number",
    "category",
    "price",
    "discount",
    "available",
    "release_date",
    "homepage",
    "features",
)


class LaptopRepository:
    """Репозиторий для работы с Laptop, маркой и изображениями"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def fetch_one(self, stmt: Select, with_images: bool = False) -> Optional["Laptop"]:
        """Выполнение запроса, ожидающего не более одного Laptop"""
        result = await self.session.execute(stmt)
        db_laptop = result.unique().scalar_one_or_none()
        return self._to_domain(db_laptop, with_images) if db_laptop else None

    async def fetch_all(self, stmt: Select) -> List["Laptop"]:
        """Выполнение запроса поиска"""
        result = await self.session.execute(stmt)
        return [self._to_domain(db_laptop) for db_laptop in result.scalars().all()]

    async def count(self, stmt: Select) -> int:
        """Количество строк того же запроса без LIMIT/OFFSET"""
        subquery = stmt.limit(None).offset(None).order_by(None).subquery()
        result = await self.session.execute(select(func.count()).select_from(subquery))
        return result.scalar()

    async def model_number_exists(self, model_number: str) -> bool:
        result = await self.session.execute(
            select(exists().where(LaptopModel.model_number == model_number))
        )
        return bool(result.scalar())

    async def create(self, laptop: "Laptop") -> "Laptop":
        """Создание Laptop вместе с маркой и изображениями в одной транзакции"""
        db_laptop = LaptopModel(
            model_number=laptop.model_number,
            category=laptop.category,
            price=laptop.price,
            discount=laptop.discount,
            available=laptop.available,
            release_date=laptop.release_date,
            homepage=laptop.homepage,
            features=laptop.features,
            brand=BrandModel(name=laptop.brand.name, series=laptop.brand.series),
            images=[
                ImageModel(caption=image.caption, content_type=image.content_type)
                for image in laptop.images or []
            ],
        )

        self.session.add(db_laptop)
        try:
            await self.session.commit()
        except SQLAlchemyError:
            await self.session.rollback()
            raise
        return self._to_domain(db_laptop, with_images=True)

    async def update(self, laptop_id: int, laptop: "Laptop", version_db: int) -> Optional[int]:
        """Перенос заданных полей на сохраненный Laptop; возвращает новую версию.

        version_db - версия, с которой сравнивалась версия клиента.
        UPDATE выполняется с условием version = version_db; если строку
        уже изменили, выбрасывается StaleDataError.
        """
        db_laptop = await self.session.get(LaptopModel, laptop_id, populate_existing=True)
        if db_laptop is None:
            return None
        if db_laptop.version != version_db:
            raise StaleDataError(
                f"Laptop {laptop_id} has version {db_laptop.version}, expected {version_db}"
            )

        for name in UPDATABLE_FIELDS:
            value = getattr(laptop, name)
            if value is not None:
                setattr(db_laptop, name, value)
        db_laptop.updated_at = datetime.now(timezone.utc)

        try:
            await self.session.commit()
        except SQLAlchemyError:
            await self.session.rollback()
            raise
        return db_laptop.version

    async def delete_aggregate(self, laptop: "Laptop") -> bool:
        """Удаление файла, марки, изображений и Laptop в одной транзакции"""
        try:
            await self.session.execute(
                delete(LaptopFileModel).where(LaptopFileModel.laptop_id == laptop.id)
            )
            if laptop.brand is not None and laptop.brand.id is not None:
                await self.session.execute(delete(BrandModel).where(BrandModel.id == laptop.brand.id))
            for image in laptop.images or []:
                await self.session.execute(delete(ImageModel).where(ImageModel.id == image.id))

            result = await self.session.execute(delete(LaptopModel).where(LaptopModel.id == laptop.id))
            await self.session.commit()
        except SQLAlchemyError:
            await self.session.rollback()
            raise
        return result.rowcount > 0

    def _to_domain(self, db_laptop: LaptopModel, with_images: bool = False) -> "Laptop":
        """Преобразование модели БД в доменную сущность"""
        from laptop_api.domains.laptops.entities import Laptop, Brand, Image

        brand = None
        if db_laptop.brand is not None:
            brand = Brand(
                id=db_laptop.brand.id,
                name=db_laptop.brand.name,
                series=db_laptop.brand.series
            )

        images = None
        if with_images:
            images = [
                Image(id=image.id, caption=image.caption, content_type=image.content_type)
                for image in db_laptop.images
            ]

        return Laptop(
            id=db_laptop.id,
            version=db_laptop.version,
            model_number=db_laptop.model_number,
            category=db_laptop.category,
            price=db_laptop.price,
            discount=db_laptop.discount,
            available=db_laptop.available,
            release_date=db_laptop.release_date,
            homepage=db_laptop.homepage,
            features=list(db_laptop.features) if db_laptop.features is not None else None,
            brand=brand,
            images=images,
            created_at=db_laptop.created_at,
            updated_at=db_laptop.updated_at
        )


class LaptopFileRepository:
    """Репозиторий для двоичных файлов Laptop"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_laptop_id(self, laptop_id: int) -> Optional["LaptopFile"]:
        """Получение файла по ID Laptop"""
        result = await self.session.execute(
            select(LaptopFileModel).where(LaptopFileModel.laptop_id == laptop_id)
        )
        db_file = result.scalar_one_or_none()
        return self._to_domain(db_file) if db_file else None

    async def replace(self, laptop_id: int, data: bytes, filename: str, mimetype: str) -> "LaptopFile":
        """Удаление прежнего файла (если есть) и сохранение нового"""
        db_file = LaptopFileModel(
            laptop_id=laptop_id,
            filename=filename,
            mimetype=mimetype,
            data=data
        )
        try:
            await self.session.execute(
                delete(LaptopFileModel).where(LaptopFileModel.laptop_id == laptop_id)
            )
            self.session.add(db_file)
            await self.session.commit()
        except SQLAlchemyError:
            await self.session.rollback()
            raise
        return self._to_domain(db_file)

    def _to_domain(self, db_file: LaptopFileModel) -> "LaptopFile":
        from laptop_api.domains.laptops.entities import LaptopFile

        return LaptopFile(
            id=db_file.id,
            laptop_id=db_file.laptop_id,
            filename=db_file.filename,
            mimetype=db_file.mimetype,
            data=db_file.data
        )
