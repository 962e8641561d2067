from typing import Optional
from pydantic import BaseModel
from sqlalchemy import Column, Index, Integer, Text
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class NewsRow(Base):
    # Mesmo formato da tabela original; ferramentas externas leem/escrevem nela.
    __tablename__ = "news"
    __table_args__ = (
        Index("ix_news_release_time", "release_time"),
        {"sqlite_autoincrement": True},
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    headline = Column(Text)
    summary = Column(Text)
    release_time = Column(Text)
    link = Column(Text)


class NewsItem(BaseModel):
    headline: str
    summary: str = ""
    release_time: str  # 'YYYY-MM-DD HH:MM:SS', chave de ordenação
    link: str = ""     # texto do "more info", não é URL validada
    id: Optional[int] = None  # atribuído pelo banco
