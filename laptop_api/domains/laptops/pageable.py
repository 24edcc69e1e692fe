import math
from dataclasses import dataclass
from typing import Generic, List, Optional, TypeVar

from laptop_api.core.config import settings

DEFAULT_PAGE_NUMBER = 0

T = TypeVar("T")


@dataclass(frozen=True)
class Pageable:
    """Запрошенная страница: номер (с 0) и размер. size=0 - без пагинации"""
    number: Optional[int] = None
    size: Optional[int] = None


@dataclass
class Slice(Generic[T]):
    content: List[T]
    total_elements: int


def _to_int(value) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def create_pageable(number=None, size=None) -> Pageable:
    """Pageable из строк запроса; неверные значения заменяются значениями по умолчанию"""
    number_int = _to_int(number)
    if number_int is None or number_int < 0:
        number_int = DEFAULT_PAGE_NUMBER

    size_int = _to_int(size)
    if size_int is None or size_int <= 0 or size_int > settings.max_page_size:
        size_int = settings.default_page_size

    return Pageable(number=number_int, size=size_int)


def total_pages(total_elements: int, size: int) -> int:
    if size <= 0:
        return 1
    return math.ceil(total_elements / size)
