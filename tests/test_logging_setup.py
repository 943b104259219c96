import logging

from gametasks.logging_setup import setup_logging


def test_setup_logging_writes_app_logs_to_file(tmp_path):
    log_file = tmp_path / "logs" / "app.log"
    root = logging.getLogger()
    previous = list(root.handlers)

    try:
        setup_logging("INFO", log_file)
        logging.getLogger("gametasks.crud").info("tarefa criada")
        for handler in root.handlers:
            handler.flush()

        assert "tarefa criada" in log_file.read_text(encoding="utf-8")
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()
        for handler in previous:
            root.addHandler(handler)
