from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api.routes import ping, queue
from app.core.config import get_settings
from app.core.logging import configure_logging, init_tracer, shutdown_tracer
from app.queue import QueueConfig, QueueScheduler, QueueService


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logger = configure_logging(settings)
    tracer_provider = init_tracer(settings)

    service = QueueService(QueueConfig.from_settings(settings))
    scheduler = QueueScheduler(service)

    app.state.logger = logger
    app.state.tracer_provider = tracer_provider
    app.state.queue_service = service
    app.state.queue_scheduler = scheduler

    scheduler.start()
    logger.info(
        "Admission queue started (capacity=%d, tick=%.2fs, sweep=%.2fs)",
        service.config.capacity,
        service.config.promotion_tick_seconds,
        service.config.sweep_interval_seconds,
    )
    try:
        yield
    finally:
        await scheduler.stop()
        shutdown_tracer(tracer_provider)


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.include_router(ping.router)
    app.include_router(queue.router)
    return app


app = create_app()
