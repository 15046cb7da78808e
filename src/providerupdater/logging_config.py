import logging
import re
from pathlib import Path
from typing import Optional


class SensitiveDataFilter(logging.Filter):
    """Filter to mask credentials embedded in URLs, such as proxy URLs."""

    PATTERNS = {
        "url_credentials": r"(?P<scheme>[a-z][a-z0-9+.-]*://)[^\s/@:]+:[^\s/@]+@",
        "secret": r"(?:password|token|secret)\s*[=:]\s*\S+",
    }

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()

        message = re.sub(
            self.PATTERNS["url_credentials"],
            r"\g<scheme>[MASKED_CREDENTIAL]@",
            message,
            flags=re.IGNORECASE,
        )
        message = re.sub(self.PATTERNS["secret"], "[MASKED_CREDENTIAL]", message, flags=re.IGNORECASE)

        record.msg = message
        record.args = ()
        return True


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
    mask_sensitive: bool = True,
) -> None:
    """Setup logging on the root logger with optional sensitive data filtering"""

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper()))

    # Remove existing handlers to avoid duplication
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    root_logger.addHandler(stream_handler)

    if mask_sensitive:
        if not any(isinstance(f, SensitiveDataFilter) for f in root_logger.filters):
            root_logger.addFilter(SensitiveDataFilter())
    else:
        for f in [f for f in root_logger.filters if isinstance(f, SensitiveDataFilter)]:
            root_logger.removeFilter(f)
