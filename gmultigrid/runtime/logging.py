import contextlib
import sys
import logging


def reset_logging(level=logging.INFO):
    """
    Config the logger such that logging.info(...) works like print(...)
    """
    root_logger = logging.getLogger()

    # clear any existing handlers
    if root_logger.hasHandlers():
        root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter('%(message)s'))
    root_logger.addHandler(console_handler)

    root_logger.setLevel(level)


@contextlib.contextmanager
def logging_to_file(log_file, level=logging.INFO):
    """Copy the log records emitted inside the block into `log_file`.

    Other file handlers of the root logger are detached for the duration, so that each run of a
    sweep has its own log. The root logger lets records of `level` through while the block runs.
    """
    root_logger = logging.getLogger()

    detached = [h for h in root_logger.handlers if isinstance(h, logging.FileHandler)]
    for h in detached:
        root_logger.removeHandler(h)

    file_handler = logging.FileHandler(log_file, encoding='utf-8')
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter("%(name)s %(levelname)s %(message)s"))
    root_logger.addHandler(file_handler)

    old_level = root_logger.level
    root_logger.setLevel(min(old_level, level))
    try:
        yield file_handler
    finally:
        root_logger.setLevel(old_level)
        root_logger.removeHandler(file_handler)
        file_handler.close()
        for h in detached:
            root_logger.addHandler(h)
