"""
HTTP entry point for the import pipeline.

GET /export/csv runs the whole import synchronously and returns the export
as a download. Runs are serialized with a lock so overlapping requests queue
instead of racing on the store, and each run writes its own file, which is
removed once it has been sent.
"""

import threading
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from fastapi import BackgroundTasks, FastAPI, HTTPException, Query, Response
from fastapi.responses import FileResponse, PlainTextResponse

from fda_importer.batch import ImportPipeline
from fda_importer.config import Settings, load_settings
from fda_importer.export import timestamped_export_path
from fda_importer.observability.logger import get_logger
from fda_importer.observability.metrics import (
    generate_metrics,
    get_content_type,
    increment_counter,
    pipeline_duration_seconds,
    pipeline_runs_total,
    track_duration,
)
from fda_importer.sources import OpenFDASource
from fda_importer.warehouse import DatabaseConnectionPool


logger = get_logger(__name__)

STATUS_TEXT = "FDA device importer is running. GET /export/csv to run an import and download the result."


def _remove_export(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Could not remove served export {path}: {e}")


def create_app(
    settings: Settings | None = None,
    pool: DatabaseConnectionPool | None = None,
    source: OpenFDASource | None = None,
    pipeline: ImportPipeline | None = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Resources not passed in are created at startup from settings and the
    environment, and closed at shutdown.

    Args:
        settings: Importer settings (defaults to load_settings())
        pool: Database pool to use instead of creating one
        source: openFDA source to use instead of creating one
        pipeline: Fully built pipeline, bypassing pool and source creation

    Returns:
        FastAPI application
    """
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = []
        try:
            active = pipeline
            if active is None:
                db_pool = pool
                if db_pool is None:
                    db_pool = DatabaseConnectionPool()
                    owned.append(db_pool)
                if not db_pool.is_open:
                    logger.info(f"Connecting to database: {db_pool.database}")
                    db_pool.open()

                api_source = source
                if api_source is None:
                    api_source = OpenFDASource(
                        base_url=settings.api.base_url,
                        batch_size=settings.api.batch_size,
                        api_key=settings.api.api_key,
                        timeout=settings.api.timeout,
                    )
                    owned.append(api_source)

                active = ImportPipeline(db_pool, api_source, settings.pipeline)

            active.schema_manager.ensure_schema()
            app.state.pipeline = active
            yield
        finally:
            for resource in reversed(owned):
                resource.close()

    app = FastAPI(title="FDA Device Importer", lifespan=lifespan)
    app.state.settings = settings
    app.state.run_lock = threading.Lock()

    @app.get("/", response_class=PlainTextResponse)
    def index():
        return STATUS_TEXT

    @app.get("/health")
    def health():
        return {"status": "ok", "time": datetime.now(timezone.utc).isoformat()}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_metrics(), media_type=get_content_type())

    @app.get("/devices")
    def list_devices(
        decision: Optional[str] = Query(None),
        applicant: Optional[str] = Query(None),
        limit: Optional[int] = Query(None, ge=1),
    ):
        devices = app.state.pipeline.query.find(decision=decision, applicant=applicant, limit=limit)
        return {"count": len(devices), "devices": [device.model_dump(mode="json") for device in devices]}

    @app.get("/export/csv")
    def export_csv(background_tasks: BackgroundTasks):
        try:
            with app.state.run_lock:
                export_path = timestamped_export_path(settings.pipeline.export_dir)
                with track_duration(pipeline_duration_seconds, trigger="http"):
                    summary = app.state.pipeline.run(export_path=export_path, report_approved=False)
        except Exception:
            logger.error("Import triggered over HTTP failed", exc_info=True)
            increment_counter(pipeline_runs_total, trigger="http", status="failure")
            raise HTTPException(status_code=500, detail="Import failed")

        export = summary.export
        if export is not None and export.error:
            logger.error(f"Export triggered over HTTP failed: {export.error}")
            increment_counter(pipeline_runs_total, trigger="http", status="failure")
            raise HTTPException(status_code=500, detail="Export failed")

        increment_counter(pipeline_runs_total, trigger="http", status="success")

        if export is None or not export.written:
            raise HTTPException(status_code=404, detail="No device data to export")

        background_tasks.add_task(_remove_export, export.path)
        return FileResponse(export.path, media_type="text/csv", filename=export.path.name)

    return app
