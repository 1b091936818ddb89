# tests/test_cli.py
from unittest.mock import patch

from click.testing import CliRunner

from catalog.core.config import settings
from catalog.worker.celery_app import celery_app
from main import cli


def test_list_sources():
    result = CliRunner().invoke(cli, ["list-sources"])

    assert result.exit_code == 0
    assert "laptops.csv: Laptops / Computers" in result.output
    assert "mobiles.csv: Smartphones / Mobile Devices (max 150 rows)" in result.output


def test_cleanup_runs_inline():
    result = CliRunner().invoke(cli, ["cleanup"])

    assert result.exit_code == 0
    assert "cleanup: success" in result.output


def test_unreachable_database_exits_with_error():
    with patch("main.check_database_connection", side_effect=RuntimeError("connection refused")):
        result = CliRunner().invoke(cli, ["import-products"])

    assert result.exit_code == 1


def test_failed_step_exits_with_error():
    failure = {"status": "error", "step": "create_deals", "error_type": "OperationalError", "error_message": "boom"}
    with patch("main.IngestorManager") as manager:
        manager.return_value.create_deals.return_value = failure
        result = CliRunner().invoke(cli, ["create-deals", "--target", "10"])

    assert result.exit_code == 1
    manager.return_value.create_deals.assert_called_once_with(10)


def test_queue_submits_task():
    with patch("catalog.worker.tasks.ingest.rebuild") as rebuild_task:
        rebuild_task.delay.return_value.id = "task-123"
        result = CliRunner().invoke(cli, ["rebuild", "--queue"])

    assert result.exit_code == 0
    assert "Task submitted: task-123" in result.output
    rebuild_task.delay.assert_called_once_with(None)


def test_queued_tasks_use_catalog_broker():
    from catalog.worker.tasks.ingest import rebuild

    assert rebuild.app is celery_app
    assert rebuild.app.main == "catalog"
    assert rebuild.app.conf.broker_url == settings.celery_broker_url
    assert celery_app.conf.task_routes["catalog:*"] == {"queue": "catalog"}
