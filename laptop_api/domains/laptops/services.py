import logging
import re
from typing import Optional, Mapping, Any, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from laptop_api.db.repositories.laptop_repository import LaptopRepository, LaptopFileRepository
from laptop_api.domains.laptops import criteria as search_criteria
from laptop_api.domains.laptops.entities import Laptop, LaptopFile
from laptop_api.domains.laptops.exceptions import (
    LaptopNotFoundError, DuplicateModelNumberError,
    VersionInvalidError, VersionOutdatedError
)
from laptop_api.domains.laptops.pageable import Pageable, Slice
from laptop_api.domains.laptops.query_builder import QueryBuilder
from laptop_api.domains.mail.services import MailService

logger = logging.getLogger(__name__)


def _normalize_features(laptop: Laptop) -> Laptop:
    if laptop.features is None:
        laptop.features = []
    return laptop


class LaptopReadService:
    """Сервис для чтения Laptop. Чтение выполняется без явной транзакции"""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.laptop_repository = LaptopRepository(session)
        self.file_repository = LaptopFileRepository(session)
        self.query_builder = QueryBuilder()

    async def find_by_id(self, laptop_id: int, with_images: bool = False) -> Laptop:
        """Получение Laptop по ID вместе с маркой"""
        logger.debug("find_by_id: id=%s, with_images=%s", laptop_id, with_images)

        stmt = self.query_builder.build_id(laptop_id, with_images=with_images)
        laptop = await self.laptop_repository.fetch_one(stmt, with_images=with_images)
        if laptop is None:
            raise LaptopNotFoundError(f"There is no laptop with ID {laptop_id}", laptop_id=laptop_id)

        logger.debug("find_by_id: laptop=%r, brand=%r", laptop, laptop.brand)
        return _normalize_features(laptop)

    async def find_file_by_laptop_id(self, laptop_id: int) -> Optional[LaptopFile]:
        """Получение двоичного файла Laptop; None, если файла нет"""
        logger.debug("find_file_by_laptop_id: laptop_id=%s", laptop_id)
        laptop_file = await self.file_repository.get_by_laptop_id(laptop_id)
        if laptop_file is None:
            logger.debug("find_file_by_laptop_id: no file found")
            return None

        logger.debug("find_file_by_laptop_id: filename=%s", laptop_file.filename)
        return laptop_file

    async def find(self, criteria: Optional[Mapping[str, Any]], pageable: Pageable) -> Slice[Laptop]:
        """Поиск Laptop по критериям с пагинацией"""
        logger.debug("find: criteria=%s, pageable=%s", criteria, pageable)

        if not criteria:
            return await self._find_all(pageable)

        # Неверные критерии выглядят так же, как пустой результат
        if not search_criteria.validate(criteria):
            raise LaptopNotFoundError("Invalid search criteria")

        try:
            stmt = self.query_builder.build(criteria, pageable)
        except ValueError as e:
            logger.debug("find: %s", e)
            raise LaptopNotFoundError("Invalid search criteria") from e

        laptops = await self.laptop_repository.fetch_all(stmt)
        if not laptops:
            logger.debug("find: no laptops found")
            raise LaptopNotFoundError(f"No laptops found: {dict(criteria)}, page {pageable.number}")

        total_elements = await self.laptop_repository.count(stmt)
        return self._create_slice(laptops, total_elements)

    async def _find_all(self, pageable: Pageable) -> Slice[Laptop]:
        stmt = self.query_builder.build({}, pageable)
        laptops = await self.laptop_repository.fetch_all(stmt)
        if not laptops:
            raise LaptopNotFoundError(f'Invalid page "{pageable.number}"')

        total_elements = await self.laptop_repository.count(stmt)
        return self._create_slice(laptops, total_elements)

    def _create_slice(self, laptops, total_elements: int) -> Slice[Laptop]:
        content = [_normalize_features(laptop) for laptop in laptops]
        logger.debug("create_slice: size=%d, total_elements=%d", len(content), total_elements)
        return Slice(content=content, total_elements=total_elements)


class LaptopWriteService:
    """Сервис для записи Laptop: создание, файл, обновление, удаление"""

    VERSION_PATTERN = re.compile(r'^"(\d{1,3})"')

    def __init__(self, session: AsyncSession, mail_service: Optional[MailService] = None):
        self.session = session
        self.laptop_repository = LaptopRepository(session)
        self.file_repository = LaptopFileRepository(session)
        self.read_service = LaptopReadService(session)
        self.mail_service = mail_service or MailService()

    async def create(self, laptop: Laptop) -> int:
        """Создание Laptop; возвращает новый ID"""
        logger.debug("create: laptop=%r", laptop)
        await self._validate_create(laptop)

        created = await self.laptop_repository.create(laptop)
        await self._send_mail(created)

        return created.id

    async def add_file(self, laptop_id: int, data: bytes, filename: str, mimetype: str) -> LaptopFile:
        """Сохранение двоичного файла (например, изображения) для Laptop"""
        logger.debug("add_file: laptop_id=%s, filename=%s, mimetype=%s", laptop_id, filename, mimetype)

        laptop = await self.read_service.find_by_id(laptop_id)

        return await self.file_repository.replace(laptop.id, data, filename, mimetype)

    async def update(self, laptop_id: Optional[int], laptop: Laptop, version: str) -> int:
        """Обновление Laptop с оптимистической синхронизацией.

        version - строка вида '"3"' (как ETag). Возвращает новую версию.
        """
        logger.debug("update: id=%s, laptop=%r, version=%s", laptop_id, laptop, version)
        if laptop_id is None:
            logger.debug("update: no valid id")
            raise LaptopNotFoundError(f"There is no laptop with ID {laptop_id}", laptop_id=laptop_id)

        version_number, version_db = await self._validate_update(laptop_id, version)

        try:
            new_version = await self.laptop_repository.update(laptop_id, laptop, version_db)
        except StaleDataError as e:
            # Строку успели изменить между чтением и записью
            logger.debug("update: concurrent modification of laptop %s", laptop_id)
            raise VersionOutdatedError(version_number) from e

        if new_version is None:
            raise LaptopNotFoundError(f"There is no laptop with ID {laptop_id}", laptop_id=laptop_id)

        logger.debug("update: new_version=%d", new_version)
        return new_version

    async def delete(self, laptop_id: int) -> bool:
        """Удаление Laptop вместе с файлом, маркой и изображениями"""
        logger.debug("delete: id=%s", laptop_id)
        laptop = await self.read_service.find_by_id(laptop_id, with_images=True)

        deleted = await self.laptop_repository.delete_aggregate(laptop)
        logger.debug("delete: deleted=%s", deleted)
        return deleted

    async def _validate_create(self, laptop: Laptop) -> None:
        logger.debug("_validate_create: model_number=%s", laptop.model_number)
        if await self.laptop_repository.model_number_exists(laptop.model_number):
            raise DuplicateModelNumberError(laptop.model_number)

    async def _send_mail(self, laptop: Laptop) -> None:
        subject = f"New laptop {laptop.id}"
        brand = laptop.brand.name if laptop.brand is not None else "N/A"
        body = f"The laptop of brand <strong>{brand}</strong> has been created"
        await self.mail_service.send_mail(subject, body)

    async def _validate_update(self, laptop_id: int, version: str) -> Tuple[int, int]:
        """Версия клиента и версия в БД, с которой она сравнивалась"""
        logger.debug("_validate_update: id=%s, version=%s", laptop_id, version)
        match = self.VERSION_PATTERN.match(version) if version is not None else None
        if match is None:
            raise VersionInvalidError(version)

        version_number = int(match.group(1))
        laptop_db = await self.read_service.find_by_id(laptop_id)

        # Версия больше текущей тоже принимается
        if version_number < laptop_db.version:
            logger.debug("_validate_update: version_db=%d", laptop_db.version)
            raise VersionOutdatedError(version_number)

        logger.debug("_validate_update: laptop_db=%r", laptop_db)
        return version_number, laptop_db.version
