from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class ShortenRequest(BaseModel):
    url: Optional[str] = None


class URLUpdate(BaseModel):
    long_url: Optional[str] = Field(None, alias="longUrl")

    class Config:
        populate_by_name = True


class ShortenResponse(BaseModel):
    short_code: str = Field(..., alias="shortCode")
    short_url: str = Field(..., alias="shortUrl")

    class Config:
        populate_by_name = True


class URL(BaseModel):
    id: int
    short_code: str = Field(..., alias="shortCode")
    long_url: str = Field(..., alias="longUrl")
    created_at: datetime = Field(..., alias="createdAt")
    clicks: int

    class Config:
        from_attributes = True
        populate_by_name = True


class URLListItem(URL):
    short_url: str = Field(..., alias="shortUrl")


class URLList(BaseModel):
    urls: List[URLListItem]


class URLDeleted(BaseModel):
    message: str
    short_code: str = Field(..., alias="shortCode")

    class Config:
        populate_by_name = True
