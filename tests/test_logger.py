import logging

from mail_relay.logger import LOG_FORMAT, configure_logging, get_logger


def test_get_logger_reuses_existing_logger():
    logger = get_logger("TestLogger")
    handler_count = len(logger.handlers)

    same_logger = get_logger("TestLogger")
    assert logger is same_logger
    assert len(same_logger.handlers) == handler_count


def test_default_logger_name():
    assert get_logger().name == "MailRelay"


def test_configure_logging_sets_root_level():
    root = logging.getLogger()
    previous_level = root.level
    previous_handlers = list(root.handlers)
    try:
        configure_logging("warning")
        assert root.level == logging.WARNING
        assert root.handlers[-1].formatter._fmt == LOG_FORMAT

        configure_logging("not-a-level")
        assert root.level == logging.INFO
    finally:
        root.handlers[:] = previous_handlers
        root.setLevel(previous_level)
