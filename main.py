import sys

import click
import uvicorn

from catalog.core.config import ConfigurationError, settings, validate_settings
from catalog.core.logging import get_logger
from catalog.db.base import check_database_connection
from catalog.ingestors.manager import IngestorManager
from catalog.worker.celery_app import celery_app

logger = get_logger(__name__)


def _preflight():
    """Validate settings and make sure the database answers; exit 1 otherwise."""
    try:
        validate_settings(settings)
    except ConfigurationError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)

    try:
        check_database_connection()
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        click.echo(f"Error: cannot connect to the database: {e}", err=True)
        sys.exit(1)


def _report(result):
    """Print a pipeline result and exit 1 when it failed."""
    steps = result.get("steps", [result])
    for step in steps:
        name = step.get("step", "pipeline")
        if step.get("status") == "success":
            click.echo(f"{name}: success ({step.get('duration_seconds', 0):.2f}s)")
            for key, value in step.get("result", {}).items():
                click.echo(f"  {key}: {value}")
        else:
            click.echo(
                f"{name}: {step.get('error_type', 'error')}: {step.get('error_message')}",
                err=True,
            )
    if result.get("status") != "success":
        sys.exit(1)


def _submit(task, *args):
    result = task.delay(*args)
    logger.info(f"Submitted {task.name} to the {celery_app.main} worker")
    click.echo(f"Task submitted: {result.id}")


@click.group()
def cli():
    """Tech deals catalog CLI"""
    pass


@cli.command()
@click.option("--host", default="0.0.0.0")
@click.option("--port", default=None, type=int, help="Defaults to PORT")
@click.option("--workers", default=1)
@click.option("--production", is_flag=True, help="Run in production mode")
def serve(host, port, workers, production):
    """Start the API server"""
    reload = not production  # Auto-reload unless production mode

    uvicorn.run(
        "catalog.api.web_app:app",
        host=host,
        port=port or settings.PORT,
        reload=reload,
        workers=workers if production else 1,
        log_level="info" if production else "debug",
    )


@cli.command()
@click.option("--queue", is_flag=True, help="Submit to the Celery worker instead of running inline")
def cleanup(queue):
    """Delete every product and deal"""
    _preflight()
    if queue:
        from catalog.worker.tasks.ingest import cleanup_database

        _submit(cleanup_database)
        return
    _report(IngestorManager().cleanup_database())


@cli.command("import-products")
@click.option("--queue", is_flag=True, help="Submit to the Celery worker instead of running inline")
def import_products(queue):
    """Import products from the category CSV files"""
    _preflight()
    if queue:
        from catalog.worker.tasks.ingest import import_products as import_task

        _submit(import_task)
        return
    _report(IngestorManager().import_products())


@cli.command("create-deals")
@click.option("--target", type=int, default=None, help="Number of deals (defaults to TARGET_DEALS)")
@click.option("--queue", is_flag=True, help="Submit to the Celery worker instead of running inline")
def create_deals(target, queue):
    """Replace all deals with a freshly generated set"""
    _preflight()
    if queue:
        from catalog.worker.tasks.ingest import create_deals as create_deals_task

        _submit(create_deals_task, target)
        return
    _report(IngestorManager().create_deals(target))


@cli.command()
@click.option("--target", type=int, default=None, help="Number of deals (defaults to TARGET_DEALS)")
@click.option("--queue", is_flag=True, help="Submit to the Celery worker instead of running inline")
def rebuild(target, queue):
    """Cleanup, import products and create deals"""
    _preflight()
    if queue:
        from catalog.worker.tasks.ingest import rebuild as rebuild_task

        _submit(rebuild_task, target)
        return
    _report(IngestorManager().rebuild(target))


@cli.command("list-sources")
def list_sources():
    """List the category CSV files in import order"""
    try:
        sources = IngestorManager().get_sources()
    except Exception as e:
        click.echo(f"Error: {str(e)}", err=True)
        sys.exit(1)

    click.echo(f"Catalog sources (data dir: {settings.DATA_DIR}):")
    for source in sources:
        click.echo(
            f"  - {source.filename}: {source.category} / {source.department} "
            f"(max {source.max_rows} rows)"
        )


if __name__ == "__main__":
    cli()
