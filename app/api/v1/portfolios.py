# app/api/v1/portfolios.py
"""
Portfolio endpoints for the signed-in job seeker.

Upload limits (size, allowed extensions) are checked here, before the
portfolio service sees the files.
"""
from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status
from typing import List, Optional

from app.api.deps import get_portfolio_service
from app.api.v1.auth import get_current_user_id
from app.api.v1.schemas import (
    BasicInfoRequest,
    ExistPortfolioResp,
    PortfolioResp,
    ReorderRequest,
    portfolio_resp,
)
from app.core.config import settings
from app.core.exceptions import ValidationError
from app.models.portfolio import ItemDraft, UploadedFile
from app.services.portfolio import PortfolioService
from app.services.storage import file_extension

router = APIRouter(prefix="/portfolios", tags=["portfolios"])


async def _read_uploads(files: Optional[List[UploadFile]]) -> List[UploadedFile]:
    out = []
    for f in files or []:
        data = await f.read()
        if not data:
            # empty parts are skipped by the service
            out.append(UploadedFile(filename=f.filename, content_type=f.content_type, data=b""))
            continue
        if len(data) > settings.MAX_UPLOAD_BYTES:
            raise ValidationError(
                f"file too large: {f.filename} (max {settings.MAX_UPLOAD_BYTES // (1024 * 1024)}MB)"
            )
        if file_extension(f.filename) not in settings.ALLOWED_UPLOAD_EXTENSIONS:
            raise ValidationError(
                f"unsupported file format: {f.filename}; allowed: {', '.join(settings.ALLOWED_UPLOAD_EXTENSIONS)}"
            )
        out.append(UploadedFile(filename=f.filename, content_type=f.content_type, data=data))
    return out


@router.post("", response_model=PortfolioResp, status_code=status.HTTP_201_CREATED)
async def create_portfolio(
    payload: BasicInfoRequest,
    job_seeker_id: str = Depends(get_current_user_id),
    service: PortfolioService = Depends(get_portfolio_service),
):
    portfolio = await service.create_portfolio(job_seeker_id, payload)
    return portfolio_resp(portfolio, service.storage)


@router.get("/me", response_model=PortfolioResp)
async def get_my_portfolio(
    job_seeker_id: str = Depends(get_current_user_id),
    service: PortfolioService = Depends(get_portfolio_service),
):
    portfolio = await service.get_my_portfolio(job_seeker_id)
    return portfolio_resp(portfolio, service.storage)


@router.get("/exists", response_model=ExistPortfolioResp)
async def portfolio_exists(
    job_seeker_id: str = Depends(get_current_user_id),
    service: PortfolioService = Depends(get_portfolio_service),
):
    exists = await service.exists_for_job_seeker(job_seeker_id)
    return ExistPortfolioResp(job_seeker_id=job_seeker_id, exists=exists)


@router.put("/basic-info", response_model=PortfolioResp)
async def update_basic_info(
    payload: BasicInfoRequest,
    job_seeker_id: str = Depends(get_current_user_id),
    service: PortfolioService = Depends(get_portfolio_service),
):
    portfolio = await service.update_basic_info(job_seeker_id, payload)
    return portfolio_resp(portfolio, service.storage)


@router.post("/items", response_model=PortfolioResp, status_code=status.HTTP_201_CREATED)
async def add_item(
    type: str = Form(...),
    title: str = Form(...),
    content: Optional[str] = Form(None),
    files: Optional[List[UploadFile]] = File(None),
    job_seeker_id: str = Depends(get_current_user_id),
    service: PortfolioService = Depends(get_portfolio_service),
):
    uploads = await _read_uploads(files)
    draft = ItemDraft(type=type, title=title, content=content)
    portfolio = await service.add_item(job_seeker_id, draft, uploads)
    return portfolio_resp(portfolio, service.storage)


# declared before /items/{item_id} so "reorder" is not taken for an item id
@router.put("/items/reorder", response_model=PortfolioResp)
async def reorder_items(
    payload: ReorderRequest,
    job_seeker_id: str = Depends(get_current_user_id),
    service: PortfolioService = Depends(get_portfolio_service),
):
    portfolio = await service.reorder_items(job_seeker_id, payload.item_ids)
    return portfolio_resp(portfolio, service.storage)


@router.put("/items/{item_id}", response_model=PortfolioResp)
async def update_item(
    item_id: str,
    type: str = Form(...),
    title: str = Form(...),
    content: Optional[str] = Form(None),
    files: Optional[List[UploadFile]] = File(None),
    job_seeker_id: str = Depends(get_current_user_id),
    service: PortfolioService = Depends(get_portfolio_service),
):
    uploads = await _read_uploads(files)
    draft = ItemDraft(type=type, title=title, content=content)
    portfolio = await service.update_item(job_seeker_id, item_id, draft, uploads)
    return portfolio_resp(portfolio, service.storage)


@router.delete("/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(
    item_id: str,
    job_seeker_id: str = Depends(get_current_user_id),
    service: PortfolioService = Depends(get_portfolio_service),
):
    await service.delete_item(job_seeker_id, item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def delete_portfolio(
    job_seeker_id: str = Depends(get_current_user_id),
    service: PortfolioService = Depends(get_portfolio_service),
):
    await service.delete_portfolio(job_seeker_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
