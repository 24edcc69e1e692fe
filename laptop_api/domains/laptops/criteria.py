import logging
from typing import Any, Iterable, Mapping

from laptop_api.domains.laptops.entities import CATEGORIES

logger = logging.getLogger(__name__)

# Свойства Laptop, по которым разрешен поиск
LAPTOP_PROPERTIES = frozenset({
    "id",
    "version",
    "model_number",
    "category",
    "price",
    "discount",
    "available",
    "release_date",
    "homepage",
    "features",
    "brand",
    "created_at",
    "updated_at",
})

# Булевы признаки, проверяемые по списку features
FEATURE_FLAGS = ("touchscreen", "backlit", "lightweight", "battery")

VALID_KEYS = LAPTOP_PROPERTIES | frozenset(FEATURE_FLAGS)


def check_keys(keys: Iterable[str]) -> bool:
    """Каждый ключ должен быть свойством Laptop или признаком из FEATURE_FLAGS"""
    valid = True
    for key in keys:
        if key not in VALID_KEYS:
            logger.debug("check_keys: invalid criteria key %r", key)
            valid = False
    return valid


def check_enums(criteria: Mapping[str, Any]) -> bool:
    category = criteria.get("category")
    logger.debug("check_enums: category=%s", category)
    return category is None or category in CATEGORIES


def validate(criteria: Mapping[str, Any]) -> bool:
    return check_keys(criteria.keys()) and check_enums(criteria)
