import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_handler: logging.Handler | None = None


def configure_logging(level: str = "INFO"):
    global _handler

    root = logging.getLogger()

    # uvicorn reloads call this again, keep a single handler
    if _handler is None:
        _handler = logging.StreamHandler()
        _handler.setFormatter(logging.Formatter(LOG_FORMAT))

    if _handler not in root.handlers:
        root.addHandler(_handler)

    root.setLevel(level.upper())
