"""Ошибки прикладного ядра для Laptop.

Роутеры REST и резолверы GraphQL переводят их в коды статуса
или в ошибки с extensions.
"""


class LaptopError(Exception):
    """Базовый класс ошибок домена Laptop"""


class LaptopNotFoundError(LaptopError):
    """Нет Laptop с таким ID, нет результатов поиска или неверные критерии"""

    def __init__(self, message: str, laptop_id=None):
        super().__init__(message)
        self.laptop_id = laptop_id


class DuplicateModelNumberError(LaptopError):
    """Номер модели уже существует"""

    def __init__(self, model_number: str):
        super().__init__(f"Model number {model_number} already exists")
        self.model_number = model_number


class VersionInvalidError(LaptopError):
    """Версия не в формате "N" (в кавычках, 1-3 цифры)"""

    def __init__(self, version: str):
        super().__init__(f'Version "{version}" is invalid')
        self.version = version


class VersionOutdatedError(LaptopError):
    """Переданная клиентом версия устарела"""

    def __init__(self, version: int):
        super().__init__(f'Version "{version}" is outdated')
        self.version = version
