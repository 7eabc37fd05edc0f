import uvicorn

from app.core.env_settings import env

if __name__ == "__main__":
    uvicorn.run("app.main:app", host=env.HOST, port=env.PORT, log_level=env.LOG_LEVEL.lower())
