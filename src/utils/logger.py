import io
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from datetime import datetime
from typing import Optional

LOG_FORMAT = '[%(asctime)s] %(levelname)s %(name)s: %(message)s'


class DotMsFormatter(logging.Formatter):
    def formatTime(self, record, datefmt=None):
        ct = datetime.fromtimestamp(record.created)
        if datefmt:
            s = ct.strftime(datefmt)
            ms = int(record.msecs)
            s = s.replace('%f', f'{ms:03d}')
        else:
            s = ct.strftime("%Y-%m-%d %H:%M:%S")
            s += f".{int(record.msecs):03d}"
        return s


def _console_stream():
    # Force UTF-8 so exchange payloads with non-ASCII text don't raise
    # UnicodeEncodeError on cp1252 consoles.
    encoding = (getattr(sys.stdout, "encoding", None) or "").lower().replace("-", "")
    if encoding == "utf8" or not hasattr(sys.stdout, "buffer"):
        return sys.stdout
    return io.TextIOWrapper(sys.stdout.buffer, encoding="utf-8", errors="replace")


def setup_logger(
    name: str,
    log_path: Optional[str | Path] = None,
    level: int | str = logging.INFO,
) -> logging.Logger:
    """Configure *name* with a console handler and, if *log_path* is set, a rotating file.

    Safe to call more than once: existing handlers are replaced, not stacked.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = DotMsFormatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S.%f')

    ch = logging.StreamHandler(_console_stream())
    ch.setFormatter(formatter)
    logger.addHandler(ch)

    if log_path is not None:
        log_path = Path(log_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = RotatingFileHandler(log_path, maxBytes=5_000_000, backupCount=5, encoding="utf-8")
        fh.setFormatter(formatter)
        logger.addHandler(fh)

    return logger
