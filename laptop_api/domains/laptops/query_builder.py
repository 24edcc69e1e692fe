import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional

from sqlalchemy import Select, select
from sqlalchemy.orm import contains_eager, selectinload

from laptop_api.core.config import settings
from laptop_api.db.models.laptop import LaptopModel, BrandModel, ImageModel
from laptop_api.domains.laptops.criteria import FEATURE_FLAGS
from laptop_api.domains.laptops.pageable import Pageable, DEFAULT_PAGE_NUMBER

logger = logging.getLogger(__name__)

# Диапазон столбцов Integer (int4)
INT_MIN = -2 ** 31
INT_MAX = 2 ** 31 - 1


def _is_true(value: Any) -> bool:
    return value is True or (isinstance(value, str) and value.lower() == "true")


def _coerce(column, value: Any) -> Any:
    """Строку из query string привести к типу столбца"""
    if not isinstance(value, str):
        return value
    python_type = column.type.python_type
    if python_type is bool:
        if value.lower() not in ("true", "false"):
            raise ValueError(f"Invalid boolean value {value!r}")
        return value.lower() == "true"
    if python_type is Decimal:
        try:
            return Decimal(value)
        except InvalidOperation as e:
            raise ValueError(f"Invalid decimal value {value!r}") from e
    if python_type is int:
        number = int(value)
        if not INT_MIN <= number <= INT_MAX:
            raise ValueError(f"Integer value {value!r} out of range")
        return number
    if python_type is datetime:
        return datetime.fromisoformat(value)
    if python_type is date:
        return date.fromisoformat(value)
    return value


class QueryBuilder:
    """Построение SELECT-запросов для Laptop. Запросы не выполняются"""

    def build_id(self, laptop_id: int, with_images: bool = False) -> Select:
        """Запрос Laptop по ID вместе с маркой и, при необходимости, изображениями"""
        stmt = (
            select(LaptopModel)
            .join(LaptopModel.brand)
            .options(contains_eager(LaptopModel.brand))
        )
        if with_images:
            stmt = (
                stmt.outerjoin(LaptopModel.images)
                .options(contains_eager(LaptopModel.images))
                .order_by(ImageModel.id)
            )

        return stmt.where(LaptopModel.id == laptop_id).execution_options(populate_existing=True)

    def build(self, criteria: Mapping[str, Any], pageable: Optional[Pageable]) -> Select:
        """Запрос для поиска, например {"brand": "a", "price": "1500", "touchscreen": "true"}.

        brand ищется как подстрока без учета регистра, price как верхняя
        граница, признаки по списку features, остальное на равенство.
        """
        rest = dict(criteria)
        brand = rest.pop("brand", None)
        price = rest.pop("price", None)
        flags = {flag: rest.pop(flag, None) for flag in FEATURE_FLAGS}
        logger.debug("build: brand=%s, price=%s, flags=%s, rest=%s, pageable=%s", brand, price, flags, rest, pageable)

        # Laptop без марки не участвует в поиске
        stmt = (
            select(LaptopModel)
            .join(LaptopModel.brand)
            .options(selectinload(LaptopModel.brand))
        )

        if isinstance(brand, str):
            stmt = stmt.where(BrandModel.name.ilike(f"%{brand}%"))

        if price is not None and not isinstance(price, bool):
            stmt = stmt.where(LaptopModel.price <= _coerce(LaptopModel.price, str(price)))

        for flag, value in flags.items():
            if _is_true(value):
                stmt = stmt.where(LaptopModel.features.like(f"%{flag.upper()}%"))

        for key, value in rest.items():
            column = LaptopModel.__table__.c[key]
            stmt = stmt.where(column == _coerce(column, value))

        stmt = stmt.order_by(LaptopModel.id).execution_options(populate_existing=True)

        if pageable is not None and pageable.size == 0:
            return stmt
        size = pageable.size if pageable is not None and pageable.size is not None else settings.default_page_size
        number = pageable.number if pageable is not None and pageable.number is not None else DEFAULT_PAGE_NUMBER
        offset = number * size
        logger.debug("build: limit=%s, offset=%s", size, offset)
        return stmt.limit(size).offset(offset)
