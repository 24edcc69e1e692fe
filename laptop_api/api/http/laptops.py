import logging
import re
from typing import Optional

from fastapi import APIRouter, Depends, File, Header, HTTPException, Request, Response, UploadFile, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from laptop_api.core.auth import CurrentUser, require_roles
from laptop_api.core.db import get_db
from laptop_api.domains.laptops.exceptions import (
    LaptopNotFoundError, DuplicateModelNumberError,
    VersionInvalidError, VersionOutdatedError
)
from laptop_api.domains.laptops.pageable import create_pageable, total_pages
from laptop_api.domains.laptops.schemas import (
    LaptopCreate, LaptopUpdate, LaptopResponse, LaptopPage, PageMeta
)
from laptop_api.domains.laptops.services import LaptopReadService, LaptopWriteService
from laptop_api.domains.mail.services import MailService
from laptop_api.api.deps import get_mail_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rest", tags=["laptops"])

ID_PATTERN = re.compile(r"^[1-9]\d{0,10}$")


def _parse_id(laptop_id: str) -> int:
    """ID из пути; неверный ID дает 404"""
    if not ID_PATTERN.match(laptop_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Laptop ID {laptop_id} is invalid"
        )
    return int(laptop_id)


@router.get("/{laptop_id}", response_model=LaptopResponse)
async def get_laptop(
    laptop_id: str,
    if_none_match: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db)
):
    """Получение Laptop по ID; ETag содержит версию"""
    logger.debug("get_laptop: id=%s, if_none_match=%s", laptop_id, if_none_match)
    read_service = LaptopReadService(db)

    try:
        laptop = await read_service.find_by_id(_parse_id(laptop_id))
    except LaptopNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    etag = f'"{laptop.version}"'
    if if_none_match == etag:
        logger.debug("get_laptop: not modified")
        return Response(status_code=status.HTTP_304_NOT_MODIFIED)

    body = LaptopResponse.model_validate(laptop).model_dump(mode="json")
    return JSONResponse(content=body, headers={"ETag": etag})


@router.get("", response_model=LaptopPage)
async def get_laptops(
    request: Request,
    db: AsyncSession = Depends(get_db)
):
    """Поиск Laptop по query string, например ?brand=a&touchscreen=true&page=0&size=5"""
    criteria = dict(request.query_params)
    page = criteria.pop("page", None)
    size = criteria.pop("size", None)
    logger.debug("get_laptops: criteria=%s, page=%s, size=%s", criteria, page, size)

    pageable = create_pageable(number=page, size=size)
    read_service = LaptopReadService(db)

    try:
        laptop_slice = await read_service.find(criteria, pageable)
    except LaptopNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return LaptopPage(
        content=[LaptopResponse.model_validate(laptop) for laptop in laptop_slice.content],
        page=PageMeta(
            size=pageable.size,
            number=pageable.number,
            total_elements=laptop_slice.total_elements,
            total_pages=total_pages(laptop_slice.total_elements, pageable.size)
        )
    )


@router.get("/file/{laptop_id}")
async def get_file(
    laptop_id: str,
    db: AsyncSession = Depends(get_db)
):
    """Двоичный файл Laptop, например изображение"""
    logger.debug("get_file: laptop_id=%s", laptop_id)
    read_service = LaptopReadService(db)

    laptop_file = await read_service.find_file_by_laptop_id(_parse_id(laptop_id))
    if laptop_file is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No file found")

    return Response(
        content=laptop_file.data,
        media_type=laptop_file.mimetype or "image/png",
        headers={"Content-Disposition": f'inline; filename="{laptop_file.filename}"'}
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_laptop(
    laptop_data: LaptopCreate,
    request: Request,
    user: CurrentUser = Depends(require_roles("admin", "user")),
    db: AsyncSession = Depends(get_db),
    mail_service: MailService = Depends(get_mail_service)
):
    """Создание Laptop; Location указывает на новый ресурс"""
    logger.debug("create_laptop: user=%s, laptop=%s", user.username, laptop_data)
    write_service = LaptopWriteService(db, mail_service)

    try:
        laptop_id = await write_service.create(laptop_data.to_entity())
    except DuplicateModelNumberError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    location = f"{request.base_url}rest/{laptop_id}"
    logger.debug("create_laptop: location=%s", location)
    return Response(status_code=status.HTTP_201_CREATED, headers={"Location": location})


@router.post("/{laptop_id}", status_code=status.HTTP_204_NO_CONTENT)
async def add_file(
    laptop_id: str,
    request: Request,
    file: UploadFile = File(...),
    user: CurrentUser = Depends(require_roles("admin", "user")),
    db: AsyncSession = Depends(get_db)
):
    """Загрузка двоичного файла для Laptop"""
    parsed_id = _parse_id(laptop_id)
    logger.debug("add_file: id=%s, filename=%s, content_type=%s", parsed_id, file.filename, file.content_type)
    write_service = LaptopWriteService(db)

    data = await file.read()
    try:
        await write_service.add_file(parsed_id, data, file.filename, file.content_type)
    except LaptopNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    location = f"{request.base_url}rest/file/{parsed_id}"
    return Response(status_code=status.HTTP_204_NO_CONTENT, headers={"Location": location})


@router.put("/{laptop_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_laptop(
    laptop_id: str,
    update_data: LaptopUpdate,
    if_match: Optional[str] = Header(None),
    user: CurrentUser = Depends(require_roles("admin", "user")),
    db: AsyncSession = Depends(get_db)
):
    """Обновление Laptop; заголовок If-Match обязателен"""
    parsed_id = _parse_id(laptop_id)
    logger.debug("update_laptop: id=%s, if_match=%s", parsed_id, if_match)

    if if_match is None:
        raise HTTPException(
            status_code=status.HTTP_428_PRECONDITION_REQUIRED,
            detail='Header "If-Match" is missing'
        )

    write_service = LaptopWriteService(db)
    try:
        new_version = await write_service.update(parsed_id, update_data.to_entity(), if_match)
    except (VersionInvalidError, VersionOutdatedError) as e:
        raise HTTPException(status_code=status.HTTP_412_PRECONDITION_FAILED, detail=str(e))
    except LaptopNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    logger.debug("update_laptop: new_version=%d", new_version)
    return Response(status_code=status.HTTP_204_NO_CONTENT, headers={"ETag": f'"{new_version}"'})


@router.delete("/{laptop_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_laptop(
    laptop_id: str,
    user: CurrentUser = Depends(require_roles("admin")),
    db: AsyncSession = Depends(get_db)
):
    """Удаление Laptop; 204 и в случае, если Laptop не было"""
    logger.debug("delete_laptop: id=%s", laptop_id)
    if not ID_PATTERN.match(laptop_id):
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    write_service = LaptopWriteService(db)
    try:
        deleted = await write_service.delete(int(laptop_id))
        logger.debug("delete_laptop: deleted=%s", deleted)
    except LaptopNotFoundError:
        logger.debug("delete_laptop: laptop %s did not exist", laptop_id)

    return Response(status_code=status.HTTP_204_NO_CONTENT)
