from typing import Union

from fastapi import APIRouter, Depends, HTTPException, Query

from backend_client import BackendClient
from dataBase import get_backend
from errors import ContactValidationError, ExchangeAccessError, RequestNotFoundError
from models.auth_models import Session
from models.exchange_models import (
    DonorSubmission,
    ExchangeRole,
    ExchangeView,
    RequesterSubmission,
    SubmissionResult,
)
from services.contact_exchange import ContactExchangeDialog
from .dependencies import get_current_session

router = APIRouter(prefix="/contact-exchanges", tags=["contact exchanges"])


@router.get("/{request_id}", response_model=ExchangeView)
async def open_contact_exchange(
    request_id: str,
    role: ExchangeRole = Query(...),
    session: Session = Depends(get_current_session),
    backend: BackendClient = Depends(get_backend),
):
    dialog = ContactExchangeDialog(backend, session, request_id, role)
    try:
        return await dialog.open()
    except RequestNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ExchangeAccessError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/{request_id}", response_model=SubmissionResult)
async def share_contact_details(
    request_id: str,
    submission: Union[DonorSubmission, RequesterSubmission],
    session: Session = Depends(get_current_session),
    backend: BackendClient = Depends(get_backend),
):
    dialog = ContactExchangeDialog(backend, session, request_id, ExchangeRole(submission.role))
    try:
        return await dialog.submit(submission)
    except ContactValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RequestNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ExchangeAccessError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))
