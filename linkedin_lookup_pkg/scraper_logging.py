import logging
import sys
from typing import Any, Optional

from .config import ERROR_SCREENSHOT_PATH, LOG_LEVEL


logger = logging.getLogger(__name__)

_INITIALIZED: bool = False


class SafeExtraFormatter(logging.Formatter):
    """Formatter that tolerates missing extra fields by injecting defaults."""

    DEFAULTS: dict[str, Any] = {
        "url": "-",
    }

    def format(self, record: logging.LogRecord) -> str:
        for key, value in self.DEFAULTS.items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return super().format(record)


def init_logging(level: Optional[str] = None) -> None:
    """Install a single stdout handler on the root logger.

    Safe to call more than once; only the first call configures anything.
    """
    global _INITIALIZED
    if _INITIALIZED:
        return

    log_level = getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    if not root_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(log_level)
        handler.setFormatter(
            SafeExtraFormatter(fmt="%(asctime)s %(levelname)s %(name)s %(message)s url=%(url)s")
        )
        root_logger.addHandler(handler)

    _INITIALIZED = True


async def save_error_screenshot(page, path: str = ERROR_SCREENSHOT_PATH) -> Optional[str]:
    """Log where the page ended up and save a screenshot of it.

    Returns the screenshot path, or None if the screenshot could not be taken.
    Never raises: it runs while another exception is already on its way out.
    """
    url = page.url
    logger.error("Extraction failed on %s", url, extra={"url": url})
    try:
        await page.screenshot(path=path)
    except Exception as e:
        logger.warning("Could not save screenshot to %s: %s", path, e, extra={"url": url})
        return None
    return path
