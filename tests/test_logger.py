"""
Tests for loguru sink configuration.
"""
import pytest
from loguru import logger

from stylematch.utils.logger import NO_REQUEST_ID, setup_logging


@pytest.fixture
def log_dir(tmp_path):
    yield setup_logging(str(tmp_path), enqueue=False)
    setup_logging(enqueue=False)


def read_log(path, prefix: str) -> str:
    files = list(path.glob(f"{prefix}_*.log"))
    assert len(files) == 1
    return files[0].read_text(encoding="utf-8")


def test_sinks_split_by_kind(log_dir):
    with logger.contextualize(request_id="req-7"):
        logger.info("matching started")
        logger.bind(access=True).info("← POST /api/v1/match - 200")
        logger.error("vector store down")
    logger.remove()  # закрыть файлы перед чтением

    app_log = read_log(log_dir, "app")
    access_log = read_log(log_dir, "access")
    error_log = read_log(log_dir, "errors")

    assert "| req-7 |" in app_log
    assert "matching started" in app_log
    assert "POST /api/v1/match" not in app_log
    assert "POST /api/v1/match" in access_log
    assert "matching started" not in access_log
    assert "vector store down" in error_log
    assert "matching started" not in error_log


def test_records_outside_requests_get_placeholder_id(log_dir):
    logger.info("demo data loaded")
    logger.remove()

    assert f"| {NO_REQUEST_ID} |" in read_log(log_dir, "app")
