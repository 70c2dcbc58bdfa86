from fastapi import HTTPException

from vidtube import config
from vidtube.db.connection import get_store


def verify_token(token: str):
    if not config.API_TOKEN or token != config.API_TOKEN:
        raise HTTPException(status_code=401, detail="Unauthorized")


def get_db():
    return get_store()
