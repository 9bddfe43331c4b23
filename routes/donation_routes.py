from typing import List

from fastapi import APIRouter, Depends, HTTPException

from backend_client import BackendClient
from dataBase import get_backend
from errors import BookNotFoundError, DeletionRefusedError
from models.auth_models import Session
from models.book_models import DonatedBook
from services.donations import EMPTY_MESSAGE, DonationsList
from .dependencies import get_current_session

router = APIRouter(prefix="/donations", tags=["donations"])


@router.get("")
async def get_my_donations(
    session: Session = Depends(get_current_session),
    backend: BackendClient = Depends(get_backend),
):
    donations = DonationsList(backend, session)
    books: List[DonatedBook] = await donations.load()
    return {
        "message": EMPTY_MESSAGE if donations.is_empty else f"Found {len(books)} donated books",
        "total_books": len(books),
        "books": books,
    }


@router.delete("/{book_id}")
async def remove_donation(
    book_id: str,
    session: Session = Depends(get_current_session),
    backend: BackendClient = Depends(get_backend),
):
    try:
        message = await DonationsList(backend, session).delete(book_id)
        return {"message": message}
    except DeletionRefusedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except BookNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))
