import logging

from lampcap.logging_config import LOGGER_NAME, setup_logging


def test_setup_replaces_handlers(tmp_path):
    log_file = tmp_path / "lampcap.log"
    logger = setup_logging(logging.DEBUG, str(log_file))
    try:
        assert logger.name == LOGGER_NAME
        assert len(logger.handlers) == 2
        logging.getLogger("lampcap.caps").debug("cap built")
        for handler in logger.handlers:
            handler.flush()
        assert "cap built" in log_file.read_text(encoding="utf-8")

        setup_logging(logging.WARNING)
        assert len(logger.handlers) == 1
        assert logger.level == logging.WARNING
    finally:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)
