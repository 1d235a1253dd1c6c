import logging

from pipeboard.infra.logger import LOG_FILENAME, setup_logging


def test_setup_logging_writes_file(tmp_path):
    logger = setup_logging("debug", tmp_path, stream=False)
    try:
        logging.getLogger("pipeboard.core.controller").debug("hello %s", "file")
        for h in logger.handlers:
            h.flush()

        assert logger.level == logging.DEBUG
        text = (tmp_path / LOG_FILENAME).read_text(encoding="utf-8")
        assert "DEBUG - pipeboard.core.controller - hello file" in text
    finally:
        for h in list(logger.handlers):
            logger.removeHandler(h)
            h.close()
        logger.setLevel(logging.NOTSET)


def test_setup_logging_replaces_handlers(tmp_path):
    logger = setup_logging(logging.INFO, tmp_path)
    logger = setup_logging(logging.WARNING, tmp_path)
    try:
        assert len(logger.handlers) == 2
        assert logger.level == logging.WARNING
    finally:
        for h in list(logger.handlers):
            logger.removeHandler(h)
            h.close()
        logger.setLevel(logging.NOTSET)
