import uvicorn

from marketnews.config import settings

if __name__ == "__main__":
    uvicorn.run("marketnews.api.main:app", host="0.0.0.0", port=settings.port)
