import logging
import time
from contextlib import asynccontextmanager
from functools import partial

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from marketnews.config import settings
from marketnews.feeds import BrowserOptions, MarketNewsExtractor, acquire_session
from marketnews.storage.repository import NewsRepository
from marketnews.tracker.ingestion import IngestionPipeline
from marketnews.tracker.scheduler import Scheduler

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
)
log = logging.getLogger(__name__)


def build_pipeline(store: NewsRepository) -> IngestionPipeline:
    options = BrowserOptions(
        headless=settings.browser_headless,
        user_agent=settings.browser_user_agent,
    )
    return IngestionPipeline(
        store=store,
        session_factory=partial(acquire_session, options),
        extractor=MarketNewsExtractor(),
        source_url=settings.source_url,
        ready_timeout_ms=settings.ready_timeout_ms,
        consent_timeout_ms=settings.consent_timeout_ms,
        offset_hours=settings.source_offset_hours,
    )


# Uma única thread; um ciclo nunca começa antes do anterior terminar
scheduler = Scheduler(settings.scrape_interval_seconds)
pipeline = None
started_at = int(time.time())


@asynccontextmanager
async def lifespan(app: FastAPI):
    global pipeline
    store = NewsRepository(settings.database_url)
    # Sem schema nenhum insert funciona: falha aqui derruba o processo
    store.init_schema()
    pipeline = build_pipeline(store)
    scheduler.start(pipeline.run_cycle, on_exit=pipeline.close)

    yield

    scheduler.stop(timeout=5)
    store.close()


app = FastAPI(lifespan=lifespan)


@app.get("/health")
def health():
    return {"status": "ok", "ts": int(time.time())}


@app.get("/last-update")
def last_update():
    report = pipeline.last_report if pipeline is not None else None
    resp = JSONResponse({
        "status": "success",
        "started_at": started_at,
        "scheduler_running": scheduler.is_running,
        "last_cycle": report.model_dump() if report else None,
    })
    resp.headers["Cache-Control"] = "public, max-age=5"
    return resp


# Por último: o mount em "/" captura tudo que não for rota da API
app.mount("/", StaticFiles(directory=settings.static_dir, html=True, check_dir=False), name="static")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("marketnews.api.main:app", host="0.0.0.0", port=settings.port)
