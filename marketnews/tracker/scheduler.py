import logging
import threading
from typing import Callable, Optional

log = logging.getLogger(__name__)


def run_forever(interval_seconds: float, cycle_fn: Callable[[], object], cancel: threading.Event) -> int:
    """
    Espera ``interval_seconds``, roda ``cycle_fn`` e repete até ``cancel`` ser setado.

    Atraso fixo: a espera começa depois que o ciclo anterior retorna, então
    ciclos nunca se sobrepõem. O cancelamento só é verificado entre ciclos.
    Exceções de ``cycle_fn`` são logadas e o loop segue. Retorna quantos
    ciclos rodaram.
    """
    runs = 0
    while not cancel.wait(timeout=max(0.0, float(interval_seconds))):
        runs += 1
        try:
            cycle_fn()
        except Exception:
            log.exception("Ingestion cycle crashed")
    log.info("Scheduler stopped after %d cycles", runs)
    return runs


class Scheduler:
    """Roda ``run_forever`` em uma única thread de fundo."""

    def __init__(self, interval_seconds: float):
        self.interval_seconds = interval_seconds
        self._cancel = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self, cycle_fn: Callable[[], object], on_exit: Optional[Callable[[], None]] = None) -> None:
        if self.is_running:
            raise RuntimeError("scheduler already running")
        self._cancel.clear()

        def _worker():
            try:
                run_forever(self.interval_seconds, cycle_fn, self._cancel)
            finally:
                # roda na mesma thread que usou os recursos (ex.: Playwright)
                if on_exit is not None:
                    try:
                        on_exit()
                    except Exception:
                        log.exception("Scheduler cleanup failed")

        self._thread = threading.Thread(target=_worker, name="ingestion-scheduler", daemon=True)
        self._thread.start()
        log.info("Scheduler started: every %ss", self.interval_seconds)

    def stop(self, timeout: Optional[float] = None) -> None:
        self._cancel.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                log.warning("Scheduler thread still running; a cycle is in progress")
            else:
                self._thread = None
