from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from backend_client import BackendClient
from dataBase import get_backend
from local_storage import LocalStorage
from models.navigation_models import MEMBER_PAGES, NavState, Page
from services.navigation import NavigationBar
from .dependencies import get_access_token, get_storage

router = APIRouter(prefix="/navigation", tags=["navigation"])


@router.get("", response_model=NavState)
async def get_navigation(
    page: Page = Page.FREE_BOOKS,
    access_token: Optional[str] = Depends(get_access_token),
    backend: BackendClient = Depends(get_backend),
    storage: LocalStorage = Depends(get_storage),
):
    async with NavigationBar(backend, storage, current_page=page) as nav:
        return await nav.start(access_token)


@router.post("/visit/{page}", response_model=NavState)
async def visit_page(
    page: Page,
    access_token: Optional[str] = Depends(get_access_token),
    backend: BackendClient = Depends(get_backend),
    storage: LocalStorage = Depends(get_storage),
):
    async with NavigationBar(backend, storage) as nav:
        state = await nav.start(access_token)
        if page in MEMBER_PAGES and not nav.context.signed_in:
            raise HTTPException(status_code=401, detail="Sign in to open this page")
        if page is not state.current_page:
            state = await nav.navigate(page)
        return state
