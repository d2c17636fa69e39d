from sendlix.logger import get_logger


def test_get_logger_reuses_existing_logger():
    logger = get_logger("sendlix.test")
    handler_count = len(logger.handlers)

    same_logger = get_logger("sendlix.test")
    assert logger is same_logger
    assert len(same_logger.handlers) == handler_count


def test_default_logger_name():
    assert get_logger().name == "sendlix"


def test_library_adds_no_handlers():
    import sendlix  # noqa: F401

    assert get_logger("sendlix").handlers == []
