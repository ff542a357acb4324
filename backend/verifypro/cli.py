import uvicorn

from verifypro.config import settings


def run_server() -> None:
    uvicorn.run("verifypro.main:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())


def main() -> None:
    run_server()


if __name__ == "__main__":
    main()
