from datetime import datetime, timezone

from sqlalchemy import (
    Column, Integer, String, Numeric, Boolean, Date, DateTime, ForeignKey, LargeBinary
)
from sqlalchemy.orm import relationship

from laptop_api.core.db import Base
from laptop_api.db.types import SimpleArray


def _utcnow():
    return datetime.now(timezone.utc)


def _next_version(version):
    # Версия начинается с 0 и увеличивается на 1 при каждом UPDATE
    return 0 if version is None else version + 1


class LaptopModel(Base):
    __tablename__ = "laptop"

    id = Column(Integer, primary_key=True, autoincrement=True)
    version = Column(Integer, nullable=False)
    model_number = Column(String(40), unique=True, index=True, nullable=False)
    category = Column(String(12))
    price = Column(Numeric(8, 2), nullable=False)
    discount = Column(Numeric(4, 3))
    available = Column(Boolean)
    release_date = Column(Date)
    homepage = Column(String(255))
    features = Column(SimpleArray(64))
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    # Только односторонние связи: дочерние таблицы хранят laptop_id
    brand = relationship("BrandModel", uselist=False, lazy="raise")
    images = relationship("ImageModel", lazy="raise", order_by="ImageModel.id")

    # UPDATE ... WHERE version = :version_db
    __mapper_args__ = {
        "version_id_col": version,
        "version_id_generator": _next_version,
    }


class BrandModel(Base):
    __tablename__ = "brand"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(40), nullable=False)
    series = Column(String(40))
    laptop_id = Column(Integer, ForeignKey("laptop.id"), nullable=False, index=True)


class ImageModel(Base):
    __tablename__ = "image"

    id = Column(Integer, primary_key=True, autoincrement=True)
    caption = Column(String(32), nullable=False)
    content_type = Column(String(16))
    laptop_id = Column(Integer, ForeignKey("laptop.id"), nullable=False, index=True)


class LaptopFileModel(Base):
    __tablename__ = "laptop_file"

    id = Column(Integer, primary_key=True, autoincrement=True)
    filename = Column(String(255), nullable=False)
    mimetype = Column(String(64))
    data = Column(LargeBinary, nullable=False)
    laptop_id = Column(Integer, ForeignKey("laptop.id"), nullable=False, unique=True)
