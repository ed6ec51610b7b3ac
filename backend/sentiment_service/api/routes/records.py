"""
Saved Analysis Records API Routes

All routes act on the records of the user named by the X-User-Id header.

Responsibilities:
- GET /records - Latest records
- GET /records/favorites - Favorite records
- GET /records/search - Search text, summary and tags
- PATCH /records/{id} - Edit tags / favorite flag
- DELETE /records/{id} - Remove a record
- POST /records/restore - Sync locally saved records to the remote store
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Query, status

from sentiment_service.api.dependencies import get_current_user, get_gateway
from sentiment_service.models.schemas import AnalysisRecord, RecordUpdate, RestoreReport
from sentiment_service.services.persistence_gateway import PersistenceGateway

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/records",
    tags=["records"],
    responses={
        401: {"description": "Authentication required"},
        404: {"description": "Record not found"},
        503: {"description": "Storage unavailable"}
    }
)


@router.get("", response_model=List[AnalysisRecord])
def list_records(
    limit: int = Query(50, ge=1, le=100),
    user_id: str = Depends(get_current_user),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """Latest records, newest first (locally saved records included)"""
    return gateway.list(user_id, limit)


@router.get("/favorites", response_model=List[AnalysisRecord])
def list_favorites(
    user_id: str = Depends(get_current_user),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    return gateway.list_favorites(user_id)


@router.get("/search", response_model=List[AnalysisRecord])
def search_records(
    q: str = Query("", description="Case-insensitive search term"),
    user_id: str = Depends(get_current_user),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """Search the latest 100 records by text, summary and tags"""
    return gateway.search(user_id, q)


@router.post("/restore", response_model=RestoreReport)
def restore_records(
    user_id: str = Depends(get_current_user),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """Move locally saved records to the remote store"""
    report = gateway.restore(user_id)
    logger.info(f"Restore requested by {user_id}: {report.model_dump()}")
    return report


@router.patch("/{record_id}", response_model=AnalysisRecord)
def update_record(
    record_id: str,
    patch: RecordUpdate,
    user_id: str = Depends(get_current_user),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    return gateway.update(record_id, patch, user_id)


@router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_record(
    record_id: str,
    user_id: str = Depends(get_current_user),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    gateway.delete(record_id, user_id)
