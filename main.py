"""
ChefMind API entry point

    python main.py        # dev server with reload when DEBUG=true
    chefmind-api          # same, via the installed console script
"""
import multiprocessing
import uvicorn
from app.core.app import create_app
from app.core.config import get_settings

settings = get_settings()
app = create_app()


def run():
    """Serve the app with uvicorn; worker count comes from settings"""
    options = {
        "host": settings.HOST,
        "port": settings.PORT,
        "log_level": settings.LOG_LEVEL.lower(),
    }
    if settings.DEBUG:
        uvicorn.run("main:app", reload=True, **options)
        return

    # 0 = scale with CPU cores
    workers = settings.UVICORN_WORKERS or (multiprocessing.cpu_count() * 2) + 1
    uvicorn.run("main:app", workers=workers, reload=False, **options)


if __name__ == "__main__":
    run()
