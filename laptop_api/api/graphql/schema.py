import dataclasses
import logging
from datetime import date
from decimal import Decimal
from typing import Annotated, List, Optional

import strawberry
from fastapi import Depends, Header
from graphql import GraphQLError
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from strawberry.fastapi import GraphQLRouter
from strawberry.types import Info

from laptop_api.api.deps import get_mail_service
from laptop_api.core.auth import user_from_authorization
from laptop_api.core.db import get_db
from laptop_api.domains.laptops import entities
from laptop_api.domains.laptops.exceptions import LaptopError
from laptop_api.domains.laptops.pageable import create_pageable
from laptop_api.domains.laptops.schemas import LaptopCreate, LaptopUpdate
from laptop_api.domains.laptops.services import LaptopReadService, LaptopWriteService
from laptop_api.domains.mail.services import MailService

logger = logging.getLogger(__name__)


def _error(message: str, code: str) -> GraphQLError:
    return GraphQLError(message, extensions={"code": code})


def _bad_user_input(message: str) -> GraphQLError:
    return _error(message, "BAD_USER_INPUT")


def _parse_id(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise _bad_user_input(f"Laptop ID {value} is invalid")


def _require_roles(info: Info, *roles: str):
    user = info.context["user"]
    if user is None:
        raise _error("Could not validate credentials", "UNAUTHENTICATED")
    if not user.has_any_role(*roles):
        raise _error("Insufficient role", "FORBIDDEN")
    return user


@strawberry.type
class Brand:
    name: str
    series: Optional[str] = None


@strawberry.type
class Image:
    caption: str
    content_type: Optional[str] = None


@strawberry.type
class Laptop:
    id: strawberry.ID
    version: int
    model_number: str
    category: Optional[str]
    price: float
    available: Optional[bool]
    release_date: Optional[date]
    homepage: Optional[str]
    features: List[str]
    brand: Optional[Brand]
    images: Optional[List[Image]]
    discount_value: strawberry.Private[Optional[Decimal]]

    @strawberry.field
    def discount(self, short: bool = True) -> str:
        """Скидка как строка, например "0.1 %" или "0.1 Prozent" """
        value = self.discount_value if self.discount_value is not None else Decimal(0)
        suffix = "%" if short else "Prozent"
        return f"{format(value.normalize(), 'f')} {suffix}"

    @classmethod
    def from_entity(cls, laptop: entities.Laptop) -> "Laptop":
        return cls(
            id=strawberry.ID(str(laptop.id)),
            version=laptop.version,
            model_number=laptop.model_number,
            category=laptop.category,
            price=float(laptop.price),
            available=laptop.available,
            release_date=laptop.release_date,
            homepage=laptop.homepage,
            features=laptop.features or [],
            brand=Brand(name=laptop.brand.name, series=laptop.brand.series) if laptop.brand else None,
            images=[
                Image(caption=image.caption, content_type=image.content_type)
                for image in laptop.images
            ] if laptop.images is not None else None,
            discount_value=laptop.discount,
        )


@strawberry.input
class SearchCriteriaInput:
    model_number: Optional[str] = None
    category: Optional[str] = None
    price: Optional[float] = None
    available: Optional[bool] = None
    homepage: Optional[str] = None
    brand: Optional[str] = None
    touchscreen: Optional[bool] = None
    backlit: Optional[bool] = None
    lightweight: Optional[bool] = None
    battery: Optional[bool] = None


@strawberry.input
class BrandInput:
    name: str
    series: Optional[str] = None


@strawberry.input
class ImageInput:
    caption: str
    content_type: Optional[str] = None


@strawberry.input
class LaptopInput:
    model_number: str
    price: float
    brand: BrandInput
    category: Optional[str] = None
    discount: Optional[float] = None
    available: Optional[bool] = None
    release_date: Optional[date] = None
    homepage: Optional[str] = None
    features: Optional[List[str]] = None
    images: Optional[List[ImageInput]] = None


@strawberry.input
class LaptopUpdateInput:
    id: strawberry.ID
    version: int
    model_number: str
    price: float
    category: Optional[str] = None
    discount: Optional[float] = None
    available: Optional[bool] = None
    release_date: Optional[date] = None
    homepage: Optional[str] = None
    features: Optional[List[str]] = None


@strawberry.type
class CreatePayload:
    id: int


@strawberry.type
class UpdatePayload:
    version: int


def _validated(schema, data: dict):
    """Проверка входных данных теми же pydantic-схемами, что и в REST"""
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        raise _bad_user_input(str(e))


@strawberry.type
class Query:
    @strawberry.field
    async def laptop(self, info: Info, id: strawberry.ID) -> Laptop:
        """Laptop по ID"""
        logger.debug("laptop: id=%s", id)
        read_service = LaptopReadService(info.context["db"])
        try:
            laptop = await read_service.find_by_id(_parse_id(id))
        except LaptopError as e:
            raise _bad_user_input(str(e))
        return Laptop.from_entity(laptop)

    @strawberry.field
    async def laptops(
        self,
        info: Info,
        criteria: Annotated[Optional[SearchCriteriaInput], strawberry.argument(name="suchkriterien")] = None,
    ) -> List[Laptop]:
        """Первая страница Laptop по критериям"""
        search = {}
        if criteria is not None:
            search = {key: value for key, value in dataclasses.asdict(criteria).items() if value is not None}
        logger.debug("laptops: criteria=%s", search)

        read_service = LaptopReadService(info.context["db"])
        try:
            laptop_slice = await read_service.find(search, create_pageable())
        except LaptopError as e:
            raise _bad_user_input(str(e))
        return [Laptop.from_entity(laptop) for laptop in laptop_slice.content]


@strawberry.type
class Mutation:
    @strawberry.mutation
    async def create(self, info: Info, input: LaptopInput) -> CreatePayload:
        _require_roles(info, "admin", "user")
        laptop_data = _validated(LaptopCreate, dataclasses.asdict(input))
        logger.debug("create: laptop=%s", laptop_data)

        write_service = LaptopWriteService(info.context["db"], info.context["mail_service"])
        try:
            laptop_id = await write_service.create(laptop_data.to_entity())
        except LaptopError as e:
            raise _bad_user_input(str(e))
        return CreatePayload(id=laptop_id)

    @strawberry.mutation
    async def update(self, info: Info, input: LaptopUpdateInput) -> UpdatePayload:
        _require_roles(info, "admin", "user")
        data = dataclasses.asdict(input)
        laptop_id = _parse_id(data.pop("id"))
        version = data.pop("version")
        update_data = _validated(LaptopUpdate, data)
        logger.debug("update: id=%s, version=%s", laptop_id, version)

        write_service = LaptopWriteService(info.context["db"])
        try:
            new_version = await write_service.update(laptop_id, update_data.to_entity(), f'"{version}"')
        except LaptopError as e:
            raise _bad_user_input(str(e))
        return UpdatePayload(version=new_version)

    @strawberry.mutation
    async def delete(self, info: Info, id: strawberry.ID) -> bool:
        _require_roles(info, "admin")
        logger.debug("delete: id=%s", id)

        write_service = LaptopWriteService(info.context["db"])
        try:
            return await write_service.delete(_parse_id(id))
        except LaptopError as e:
            raise _bad_user_input(str(e))


async def get_context(
    db: AsyncSession = Depends(get_db),
    mail_service: MailService = Depends(get_mail_service),
    authorization: Optional[str] = Header(None),
):
    return {
        "db": db,
        "mail_service": mail_service,
        "user": user_from_authorization(authorization),
    }


schema = strawberry.Schema(query=Query, mutation=Mutation)

graphql_router = GraphQLRouter(schema, context_getter=get_context, path="/graphql")
