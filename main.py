import uvicorn

from app.platform.config import settings

# Application loggers configure their own handlers (app/platform/logger.py).
if __name__ == "__main__":
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=settings.ENVIRONMENT == "local")
