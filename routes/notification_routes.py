from fastapi import APIRouter, Depends, HTTPException, Query
from typing import List

from backend_client import BackendClient
from dataBase import get_backend
from models.auth_models import Session
from models.notification_models import Notification
from .dependencies import get_current_session

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=List[Notification])
async def get_my_notifications(
    unread_only: bool = True,
    limit: int = Query(20, ge=1, le=100),
    session: Session = Depends(get_current_session),
    backend: BackendClient = Depends(get_backend),
):
    try:
        filters = {"user_id": session.user_id}
        if unread_only:
            filters["read"] = False
        rows = await backend.select("notifications", filters, order=("created_at", "desc"))
        return rows[:limit]
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.put("/{notification_id}/read")
async def mark_notification_read(
    notification_id: str,
    session: Session = Depends(get_current_session),
    backend: BackendClient = Depends(get_backend),
):
    try:
        updated = await backend.update(
            "notifications",
            {"read": True},
            {"id": notification_id, "user_id": session.user_id},
        )
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))
    if not updated:
        raise HTTPException(status_code=404, detail="Notification not found")
    return {"message": "Notification marked as read"}
