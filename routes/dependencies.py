from functools import lru_cache
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

import config
from backend_client import BackendClient
from dataBase import get_backend
from local_storage import LocalStorage
from models.auth_models import Session

bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache()
def get_storage() -> LocalStorage:
    return LocalStorage(config.LOCAL_STORAGE_PATH)


def get_access_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[str]:
    return credentials.credentials if credentials else None


async def get_current_session(
    access_token: Optional[str] = Depends(get_access_token),
    backend: BackendClient = Depends(get_backend),
) -> Session:
    session = await backend.auth.get_session(access_token)
    if session is None:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return session
