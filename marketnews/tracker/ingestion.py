import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional

from pydantic import BaseModel

from marketnews.errors import ElementTimeout, FetchError, MalformedTimestamp, StoreError
from marketnews.feeds.base import BaseExtractor, RawCandidate
from marketnews.storage.models import NewsItem
from marketnews.utils.tz_utils import SOURCE_OFFSET_HOURS, normalize_release_time

log = logging.getLogger(__name__)

CONSENT_BUTTON_SELECTOR = "button.orejime-Button--save"


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class CycleReport(BaseModel):
    status: str = "done"  # 'done' ou 'failed'
    high_water_mark: Optional[str] = None
    candidates: int = 0
    inserted: int = 0
    skipped_stale: int = 0
    skipped_malformed: int = 0
    store_errors: int = 0
    error: Optional[str] = None
    started_at: Optional[str] = None
    finished_at: Optional[str] = None


class IngestionPipeline:
    """
    Um ciclo de ingestão: carrega a página, espera a lista, extrai os
    candidatos, lê o high-water mark uma vez, normaliza e insere o que for
    mais novo.

    ``run_cycle`` não levanta exceção para erros de fetch, timeout, horário ou
    banco; o resultado volta como ``CycleReport``.
    """

    def __init__(
        self,
        store,
        session_factory: Callable,
        extractor: BaseExtractor,
        source_url: str,
        ready_timeout_ms: int = 10000,
        consent_timeout_ms: int = 5000,
        offset_hours: int = SOURCE_OFFSET_HOURS,
    ):
        self.store = store
        self.session_factory = session_factory
        self.extractor = extractor
        self.source_url = source_url
        self.ready_timeout_ms = ready_timeout_ms
        self.consent_timeout_ms = consent_timeout_ms
        self.offset_hours = offset_hours
        self.last_report: Optional[CycleReport] = None
        self._session = None

    # ---------- sessão do navegador (reutilizada entre ciclos) ----------
    def _get_session(self):
        if self._session is None:
            self._session = self.session_factory()
        return self._session

    def _discard_session(self) -> None:
        session, self._session = self._session, None
        if session is not None:
            session.close()

    def close(self) -> None:
        self._discard_session()

    # ---------- etapas do ciclo ----------
    def _acquire_page(self):
        session = self._get_session()
        session.load(self.source_url)
        try:
            consent = session.wait_for(CONSENT_BUTTON_SELECTOR, self.consent_timeout_ms)
            consent.click(timeout_ms=self.consent_timeout_ms)
        except FetchError:
            log.debug("No cookies popup found.")
        return session

    def _wait_ready(self, page) -> None:
        for selector in self.extractor.ready_selectors:
            page.wait_for(selector, self.ready_timeout_ms)

    def _normalize(self, candidate: RawCandidate) -> NewsItem:
        return NewsItem(
            headline=candidate.headline_text,
            summary=candidate.summary_text,
            release_time=normalize_release_time(candidate.raw_release_time, self.offset_hours),
            link=candidate.more_info_text,
        )

    def insert_newer(self, items: List[NewsItem], high_water_mark: Optional[str], report: CycleReport) -> None:
        """Insere cada item estritamente mais novo que o snapshot ``high_water_mark``."""
        for item in items:
            # O snapshot não avança durante o ciclo
            if high_water_mark is not None and item.release_time <= high_water_mark:
                report.skipped_stale += 1
                continue
            try:
                self.store.insert(item)
            except StoreError as e:
                report.store_errors += 1
                log.error("Dropping %r for this cycle: %s", item.headline, e)
                continue
            report.inserted += 1
            log.info("Inserted news: %s", item.headline)

    def _finish(self, report: CycleReport) -> CycleReport:
        report.finished_at = _utcnow_iso()
        self.last_report = report
        log.info(
            "Cycle %s: %d candidates, %d inserted, %d stale, %d malformed, %d store errors",
            report.status, report.candidates, report.inserted,
            report.skipped_stale, report.skipped_malformed, report.store_errors,
        )
        return report

    def _fail(self, report: CycleReport, message: str) -> CycleReport:
        report.status, report.error = "failed", message
        return self._finish(report)

    def run_cycle(self) -> CycleReport:
        report = CycleReport(started_at=_utcnow_iso())
        try:
            page = self._acquire_page()
            self._wait_ready(page)
            candidates = list(self.extractor.extract(page))
        except ElementTimeout as e:
            log.error("Timed out waiting for the news list: %s", e)
            return self._fail(report, str(e))
        except FetchError as e:
            log.error("Error during scraping: %s", e)
            # próxima execução abre uma sessão nova
            self._discard_session()
            return self._fail(report, str(e))

        report.candidates = len(candidates)
        if not candidates:
            log.error("No news items found on %s", self.source_url)
            return self._fail(report, "no news items could be extracted")

        try:
            high_water_mark = self.store.latest_key()
        except StoreError as e:
            log.error("Could not read the latest release time: %s", e)
            return self._fail(report, str(e))
        report.high_water_mark = high_water_mark

        items = []
        for candidate in candidates:
            try:
                items.append(self._normalize(candidate))
            except MalformedTimestamp as e:
                report.skipped_malformed += 1
                log.warning("Skipping %r: %s", candidate.headline_text, e)

        self.insert_newer(items, high_water_mark, report)
        return self._finish(report)
