import uvicorn

from blackmate.config.settings import config


def main():
    uvicorn.run(
        "blackmate.main:app",
        host=config.server.host,
        port=config.server.port,
        log_level=config.logging.level.lower()
    )


if __name__ == "__main__":
    main()
