from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from src.app.api.deps import get_db, get_base_url
from src.app.schemas.url import (
    URL,
    URLDeleted,
    URLList,
    URLListItem,
    URLUpdate,
    ShortenRequest,
    ShortenResponse,
)
from src.app.services.url_service import (
    build_short_url,
    delete_url,
    get_url,
    list_urls,
    serialize_url,
    shorten_url,
    update_url,
)

router = APIRouter()


@router.post(
    "/shorten", response_model=ShortenResponse, status_code=status.HTTP_201_CREATED
)
def create_link(
    payload: ShortenRequest,
    response: Response,
    db: Session = Depends(get_db),
    base_url: str = Depends(get_base_url),
):
    """
    Create a shortened URL.

    Returns 201 for a new short code, or 200 with the existing short code if
    the exact same URL was shortened before.
    """
    url, created = shorten_url(db, payload.url)
    if not created:
        response.status_code = status.HTTP_200_OK
    return ShortenResponse(
        short_code=url.short_code,
        short_url=build_short_url(base_url, url.short_code),
    )


@router.get("/urls", response_model=URLList)
def list_links(
    db: Session = Depends(get_db), base_url: str = Depends(get_base_url)
):
    """
    List the most recently created URLs, newest first.
    """
    return URLList(
        urls=[
            URLListItem(
                **serialize_url(url),
                short_url=build_short_url(base_url, url.short_code),
            )
            for url in list_urls(db)
        ]
    )


@router.get("/urls/{short_code}", response_model=URL)
def get_link(short_code: str, db: Session = Depends(get_db)):
    return get_url(db, short_code)


@router.put("/urls/{short_code}", response_model=URL)
def update_link(
    short_code: str, url_update: URLUpdate, db: Session = Depends(get_db)
):
    """
    Replace the destination of a shortened URL.

    The short code, creation time and click count are left untouched.
    """
    return update_url(db, short_code, url_update.long_url)


@router.delete("/urls/{short_code}", response_model=URLDeleted)
def delete_link(short_code: str, db: Session = Depends(get_db)):
    deleted = delete_url(db, short_code)
    return URLDeleted(message="URL deleted successfully", short_code=deleted)
