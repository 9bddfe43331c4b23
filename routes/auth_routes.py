from fastapi import APIRouter, Depends, HTTPException

from backend_client import BackendClient
from dataBase import get_backend
from errors import AuthError
from local_storage import LocalStorage
from models.auth_models import LoginUser, RegisterUser, Session
from models.navigation_models import NavState
from services.navigation import NavigationBar
from session_context import SessionContext
from .dependencies import get_current_session, get_storage

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", response_model=Session)
async def sign_up(user: RegisterUser, backend: BackendClient = Depends(get_backend)):
    try:
        return await backend.auth.sign_up(user.email, user.password, user.full_name)
    except AuthError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/login", response_model=Session)
async def login(user: LoginUser, backend: BackendClient = Depends(get_backend)):
    try:
        return await backend.auth.sign_in_with_password(user.email, user.password)
    except AuthError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/logout", response_model=NavState)
async def logout(
    session: Session = Depends(get_current_session),
    backend: BackendClient = Depends(get_backend),
    storage: LocalStorage = Depends(get_storage),
):
    try:
        context = SessionContext(backend)
        await context.adopt(session)
        async with NavigationBar(backend, storage, context=context) as nav:
            await nav.start()
            return await nav.sign_out()
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))
