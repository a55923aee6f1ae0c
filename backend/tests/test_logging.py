import logging

from app.utils import logging as app_logging


def test_root_logger_carries_context_fields(caplog):
    with caplog.at_level(logging.INFO):
        app_logging.logger.info("Export generated", extra={"document_type": "rent_roll"})

    record = caplog.records[-1]
    assert record.service == app_logging.SERVICE_NAME
    assert record.document_type == "rent_roll"
    assert record.request_id is None


def test_module_exports_only_the_root_logger():
    assert app_logging.logger is logging.getLogger()
    assert not hasattr(app_logging, "application_logger")
