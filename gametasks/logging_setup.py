import logging
import sys
from pathlib import Path
from typing import Optional, Union


class _ConsoleNoiseFilter(logging.Filter):
    """
    Mantem os logs do app e do uvicorn; bibliotecas de terceiros so a partir
    de WARNING.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name == "main" or name.startswith(("gametasks.", "uvicorn")):
            return True
        return record.levelno >= logging.WARNING


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
) -> None:
    """
    Console sempre; arquivo apenas se log_file for informado.
    Chamar uma vez, antes de criar o app.
    """
    root = logging.getLogger()
    root.setLevel(level)

    # evita handlers duplicados se for chamado de novo (reload)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(str(path), encoding="utf-8")
        file_handler.setFormatter(fmt)
        root.addHandler(file_handler)

    logging.captureWarnings(True)
