from abc import ABC, abstractmethod
from typing import Iterator
from pydantic import BaseModel


class RawCandidate(BaseModel):
    headline_text: str
    summary_text: str
    more_info_text: str
    raw_release_time: str


class BaseExtractor(ABC):
    # Seletor que indica que a lista de notícias já foi renderizada
    ready_selectors: tuple = ()

    @abstractmethod
    def extract(self, page) -> Iterator[RawCandidate]:
        pass
