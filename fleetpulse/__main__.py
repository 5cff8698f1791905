import uvicorn

from .config import Settings
from .logging_config import configure_logging
from .main import create_app


def main():
    settings = Settings()
    configure_logging(settings.LOG_LEVEL)
    uvicorn.run(create_app(settings), host=settings.HOST, port=settings.PORT,
                log_config=None, timeout_keep_alive=10)


if __name__ == "__main__":
    main()
