"""
History storage for analyses, predictions and business plans.

Writes are best effort: a failing store is logged and the write is dropped,
the caller gets `None` instead of an id. Reads return plain camelCase dicts,
newest first.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from prediktor.db.models import COLLECTIONS, DocumentRecord
from prediktor.models.schemas import iso_now

logger = logging.getLogger(__name__)

ANALYSES, PREDICTIONS, BUSINESS_PLANS = COLLECTIONS

Record = Union[Mapping[str, Any], BaseModel]


def _as_payload(record: Record) -> Dict[str, Any]:
    if isinstance(record, BaseModel):
        return record.model_dump(mode="json", by_alias=True)
    return dict(record)


def _to_dict(row: DocumentRecord) -> Dict[str, Any]:
    return {
        "id": row.document_id,
        **row.payload,
        "userId": row.user_id,
        "createdAt": row.created_at,
    }


def save_document(db: Session, collection: str, user_id: str, record: Record) -> Optional[int]:
    """Append `record` to `collection`. Returns the new id, or None if the store failed."""
    if collection not in COLLECTIONS:
        raise ValueError(f"Unknown collection: {collection!r}")
    created_at = iso_now()
    payload = _as_payload(record)
    payload.pop("id", None)
    payload["userId"] = user_id
    payload["createdAt"] = created_at

    row = DocumentRecord(
        collection=collection,
        user_id=user_id,
        created_at=created_at,
        payload=payload,
    )
    try:
        db.add(row)
        db.commit()
        db.refresh(row)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to save {collection} record for user {user_id}: {e}")
        return None

    logger.debug(f"Saved {collection}/{row.document_id} for user {user_id}")
    return row.document_id


def get_documents(
    db: Session,
    collection: str,
    user_id: str,
    limit: Optional[int] = None,
) -> List[Dict[str, Any]]:
    query = (
        db.query(DocumentRecord)
        .filter(DocumentRecord.collection == collection, DocumentRecord.user_id == user_id)
        .order_by(DocumentRecord.created_at.desc(), DocumentRecord.document_id.desc())
    )
    if limit is not None:
        query = query.limit(limit)
    return [_to_dict(row) for row in query.all()]


# ─── Collections ─────────────────────────────────────────────────────────────


def save_analysis(db: Session, user_id: str, record: Record) -> Optional[int]:
    return save_document(db, ANALYSES, user_id, record)


def save_prediction(db: Session, user_id: str, record: Record) -> Optional[int]:
    return save_document(db, PREDICTIONS, user_id, record)


def save_business_plan(db: Session, user_id: str, record: Record) -> Optional[int]:
    return save_document(db, BUSINESS_PLANS, user_id, record)


def get_user_analyses(db: Session, user_id: str) -> List[Dict[str, Any]]:
    return get_documents(db, ANALYSES, user_id)


def get_user_predictions(db: Session, user_id: str) -> List[Dict[str, Any]]:
    return get_documents(db, PREDICTIONS, user_id)


def get_user_business_plans(db: Session, user_id: str) -> List[Dict[str, Any]]:
    return get_documents(db, BUSINESS_PLANS, user_id)


def get_user_history(db: Session, user_id: str) -> Dict[str, Optional[Dict[str, Any]]]:
    """Most recent analysis and prediction, either may be None."""
    analyses = get_documents(db, ANALYSES, user_id, limit=1)
    predictions = get_documents(db, PREDICTIONS, user_id, limit=1)
    return {
        "lastAnalysis": analyses[0] if analyses else None,
        "lastPrediction": predictions[0] if predictions else None,
    }
