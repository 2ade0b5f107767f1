"""
Unit tests for logging_config.
"""

import logging
import threading

import pytest

from logging_config import ThreadContextFilter, get_logger, set_thread_name, setup_logging


@pytest.fixture
def app_logger_name():
    name = "order_desk_logging_test"
    yield name
    logger = logging.getLogger(name)
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()


class TestGetLogger:

    def test_module_names_are_namespaced(self):
        assert get_logger("services.cart_store").name == "order_desk.services.cart_store"

    def test_namespaced_names_kept(self):
        assert get_logger("order_desk.app").name == "order_desk.app"
        assert get_logger("order_desk").name == "order_desk"


class TestSetupLogging:

    def test_console_only(self, app_logger_name):
        logger = setup_logging(app_name=app_logger_name, enable_file_logging=False)

        assert logger.propagate is False
        assert len(logger.handlers) == 1

    def test_file_logs(self, app_logger_name, tmp_path):
        logger = setup_logging(app_name=app_logger_name, log_dir=tmp_path)
        logger.error("store down")

        for handler in logger.handlers:
            handler.flush()

        assert (tmp_path / f"{app_logger_name}.log").exists()
        assert "store down" in (tmp_path / f"{app_logger_name}_error.log").read_text(encoding="utf-8")

    def test_reconfiguring_replaces_handlers(self, app_logger_name):
        setup_logging(app_name=app_logger_name, enable_file_logging=False)
        logger = setup_logging(app_name=app_logger_name, enable_file_logging=False)

        assert len(logger.handlers) == 1


class TestThreadContext:

    def test_filter_tags_record_with_thread(self):
        record = logging.LogRecord("order_desk", logging.INFO, __file__, 1, "msg", None, None)

        def worker():
            set_thread_name("Catalog")
            ThreadContextFilter().filter(record)

        thread = threading.Thread(target=worker)
        thread.start()
        thread.join()

        assert record.thread_name == "Catalog"
