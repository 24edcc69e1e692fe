from sqlalchemy import String
from sqlalchemy.types import TypeDecorator


class SimpleArray(TypeDecorator):
    """Список строк, сохраняемый через запятую (как "simple-array")"""

    impl = String
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return ",".join(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value == "":
            return []
        return value.split(",")

    def coerce_compared_value(self, op, value):
        # LIKE '%TOUCHSCREEN%' и сравнения сериализованной строкой
        if isinstance(value, str):
            return String()
        return self
