"""
Dependency injection - builds services.
Simple, debug-friendly DI without framework magic.
"""
from __future__ import annotations

from .adapters.db import CatalogStore
from .adapters.fs import FileProbe
from .config import (
    BATCH_CONCURRENCY,
    BATCH_ITEM_KINDS,
    CATALOG_DB,
    DB_TIMEOUT,
    PROGRESS_REPORT_EVERY,
    REACTIVE_ENABLED,
    STOP_DRAIN_TIMEOUT_S,
    initialize_directories,
)
from .features.datefix import BatchReconciler, DateCreatedFixerService, ItemCorrector, ReentrancyGuard
from .features.tasks import FixDateCreatedTask, TaskRunner
from .shared import ErrorCode, Result, get_logger, log_success

logger = get_logger(__name__)


async def _open_catalog_or_error(db_path: str) -> Result[CatalogStore]:
    logger.info("Opening catalog: %s", db_path)
    catalog = CatalogStore(db_path, timeout=DB_TIMEOUT)
    opened = await catalog.open()
    if not opened.ok:
        return Result.Err(opened.code or ErrorCode.DB_ERROR, opened.error or "Failed to open catalog")
    return Result.Ok(catalog)


async def build_services(db_path: str | None = None, *, reactive: bool | None = None) -> Result[dict]:
    """
    Build all services (DI container).

    Args:
        db_path: Path to the catalog database (default: config.CATALOG_DB)
        reactive: Start the reactive corrector (default: config.REACTIVE_ENABLED)

    Returns:
        Result[dict] of service instances
    """
    logger.info("Building services...")
    if db_path is None:
        try:
            initialize_directories()
        except OSError as exc:
            logger.error("Failed to initialize directories: %s", exc)
            return Result.Err(ErrorCode.DB_ERROR, f"Failed to initialize directories: {exc}")
        db_path = CATALOG_DB

    catalog_res = await _open_catalog_or_error(db_path)
    if not catalog_res.ok or catalog_res.data is None:
        return Result.Err(catalog_res.code or ErrorCode.DB_ERROR, catalog_res.error or "Failed to open catalog")
    catalog = catalog_res.data

    probe = FileProbe()
    corrector = ItemCorrector(catalog, probe)
    fixer = DateCreatedFixerService(catalog, corrector, ReentrancyGuard(), drain_timeout=STOP_DRAIN_TIMEOUT_S)
    reconciler = BatchReconciler(
        catalog,
        corrector,
        concurrency=BATCH_CONCURRENCY,
        kinds=BATCH_ITEM_KINDS,
        progress_every=PROGRESS_REPORT_EVERY,
    )
    tasks = TaskRunner()
    tasks.register(FixDateCreatedTask(reconciler))

    services = {
        "catalog": catalog,
        "probe": probe,
        "corrector": corrector,
        "fixer": fixer,
        "reconciler": reconciler,
        "tasks": tasks,
    }

    enable_reactive = REACTIVE_ENABLED if reactive is None else bool(reactive)
    if enable_reactive:
        await fixer.start()
        log_success(logger, "Reactive corrector enabled")
    else:
        logger.info("Reactive corrector disabled")

    log_success(logger, "All services initialized")
    return Result.Ok(services)


async def dispose_services(services: dict | None) -> None:
    """
    Stop and close every service. A failure in one does not stop the others.
    """
    if not services:
        return

    fixer = services.get("fixer")
    if fixer is not None:
        try:
            await fixer.stop()
        except Exception as exc:
            logger.warning("Error stopping reactive corrector: %s", exc, exc_info=True)

    tasks = services.get("tasks")
    if tasks is not None:
        try:
            await tasks.shutdown()
        except Exception as exc:
            logger.warning("Error stopping tasks: %s", exc, exc_info=True)

    catalog = services.get("catalog")
    if catalog is not None:
        try:
            await catalog.aclose()
        except Exception as exc:
            logger.warning("Error closing catalog: %s", exc, exc_info=True)
