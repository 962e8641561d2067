import logging
from typing import Iterator

from marketnews.errors import FetchError
from .base import BaseExtractor, RawCandidate

log = logging.getLogger(__name__)


class MarketNewsExtractor(BaseExtractor):
    """
    Lê a listagem de market news da HFM.

    Manchete e horário são lidos por linha de artigo. Resumo e "more info" vêm
    do primeiro elemento correspondente da página inteira, então todos os
    candidatos de uma mesma página compartilham esses valores.
    """

    ARTICLE_SELECTOR = ".sepH_a_line"
    HEADLINE_SELECTOR = "h5.color-red"
    RELEASE_TIME_SELECTOR = "span.g_color"
    SUMMARY_SELECTOR = "ul"
    MORE_INFO_SELECTOR = ".fxs_headline_medium"

    ready_selectors = (ARTICLE_SELECTOR, SUMMARY_SELECTOR)

    def _page_text(self, page, selector: str) -> str:
        try:
            return page.find(selector).text()
        except FetchError as e:
            log.warning("Page-level %r unavailable, using empty text: %s", selector, e)
            return ""

    def extract(self, page) -> Iterator[RawCandidate]:
        articles = page.find_all(self.ARTICLE_SELECTOR)
        if not articles:
            return

        summary = self._page_text(page, self.SUMMARY_SELECTOR)
        more_info = self._page_text(page, self.MORE_INFO_SELECTOR)

        for pos, article in enumerate(articles):
            try:
                headline = article.find(self.HEADLINE_SELECTOR).text()
                release_time = article.find(self.RELEASE_TIME_SELECTOR).text()
            except FetchError as e:
                log.warning("Skipping article #%d: %s", pos, e)
                continue
            yield RawCandidate(
                headline_text=headline,
                summary_text=summary,
                more_info_text=more_info,
                raw_release_time=release_time,
            )
