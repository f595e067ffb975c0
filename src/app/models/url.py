from sqlalchemy import Column, Index, String, Integer, Text
from src.app.db.base import BaseModel


class URL(BaseModel):
    __tablename__ = "urls"

    short_code = Column(String(10), unique=True, index=True, nullable=False)
    long_url = Column(Text, nullable=False)
    clicks = Column(Integer, default=0, server_default="0", nullable=False)


# Newest-first listing
Index("idx_created_at", URL.created_at.desc())
