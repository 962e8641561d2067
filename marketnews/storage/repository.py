import logging
from threading import Lock
from typing import Optional

from sqlalchemy import create_engine, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from marketnews.errors import StoreError
from marketnews.storage.models import Base, NewsItem, NewsRow

log = logging.getLogger(__name__)


class NewsRepository:
    """
    Armazenamento append-only das notícias coletadas.

    O repositório não deduplica: quem chama compara com ``latest_key()`` antes
    de inserir. Cada insert faz commit antes de retornar, então
    ``latest_key()`` sempre reflete os inserts anteriores deste processo.
    """

    def __init__(self, database_url: str):
        self.database_url = database_url
        connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
        self._engine = create_engine(database_url, connect_args=connect_args)
        self._session_factory = sessionmaker(
            bind=self._engine, autoflush=False, autocommit=False, expire_on_commit=False
        )
        self._lock = Lock()

    def init_schema(self) -> None:
        """Cria a tabela news e o índice de release_time, se não existirem."""
        try:
            with self._lock:
                Base.metadata.create_all(self._engine)
                # create_all pula índices de tabelas que já existiam
                for index in NewsRow.__table__.indexes:
                    index.create(self._engine, checkfirst=True)
        except SQLAlchemyError as e:
            raise StoreError(f"could not initialize schema at {self.database_url}: {e}") from e
        log.info("Connected to the news database at %s", self.database_url)

    def latest_key(self) -> Optional[str]:
        try:
            with self._lock, self._session_factory() as db:
                return db.scalar(select(func.max(NewsRow.release_time)))
        except SQLAlchemyError as e:
            raise StoreError(f"could not read latest release_time: {e}") from e

    def insert(self, item: NewsItem) -> NewsItem:
        row = NewsRow(
            headline=item.headline,
            summary=item.summary,
            release_time=item.release_time,
            link=item.link,
        )
        try:
            with self._lock, self._session_factory() as db:
                db.add(row)
                db.commit()
                new_id = row.id
        except SQLAlchemyError as e:
            raise StoreError(f"could not insert {item.headline!r}: {e}") from e
        return item.model_copy(update={"id": new_id})

    def count(self) -> int:
        try:
            with self._lock, self._session_factory() as db:
                return int(db.scalar(select(func.count()).select_from(NewsRow)) or 0)
        except SQLAlchemyError as e:
            raise StoreError(f"could not count news rows: {e}") from e

    def close(self) -> None:
        self._engine.dispose()
