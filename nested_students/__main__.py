import uvicorn

from nested_students.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "nested_students.main:app",
        host=settings.APP_HOST,
        port=settings.APP_PORT,
        reload=settings.APP_DEBUG,
    )


if __name__ == "__main__":
    main()
