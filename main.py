from gametasks import config
from gametasks.app import create_app
from gametasks.logging_setup import setup_logging

setup_logging(config.LOG_LEVEL, config.LOG_FILE)

app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
