from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from models.schemas import ErrorResponse, LinkMetadata, PreviewQuery, ValidationErrorResponse
from services.link_preview_service import LinkPreviewService
from utils.http_client import PageFetcher

router = APIRouter()


def get_page_fetcher(request: Request) -> PageFetcher:
    return request.app.state.fetcher


@router.get(
    "/preview",
    response_model=LinkMetadata,
    responses={400: {"model": ValidationErrorResponse}, 500: {"model": ErrorResponse}},
)
async def preview(
    query: Annotated[PreviewQuery, Query()],
    fetcher: PageFetcher = Depends(get_page_fetcher),
):
    return await LinkPreviewService.get_link_metadata(query.url, fetcher)
