from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from datetime import datetime
from typing import List
import logging
import uuid

from clinic_billing.clinic_database import get_db, FeeSetting
from clinic_billing.dependencies import get_api_key
from clinic_billing.model import FeeRule, FeeSettingInput, FeeSettingUpdate

router = APIRouter(tags=["Fee Settings"])
logger = logging.getLogger(__name__)


def load_fee_rules(db: Session) -> List[FeeRule]:
    """All fee rules in a stable order (oldest first), as the fee engine expects."""
    records = (
        db.query(FeeSetting)
        .order_by(FeeSetting.created_at.asc(), FeeSetting.id.asc())
        .all()
    )
    return [FeeRule.model_validate(r) for r in records]


def _get_or_404(db: Session, fee_setting_id: str) -> FeeSetting:
    record = db.query(FeeSetting).filter(FeeSetting.id == fee_setting_id).first()
    if not record:
        logger.info("Fee setting not found: %s", fee_setting_id)
        raise HTTPException(status_code=404, detail="Fee setting not found")
    return record


def _commit(db: Session, action: str):
    try:
        db.commit()
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Failed to {action} fee setting: {str(e)}")


@router.get("/fee-settings")
async def list_fee_settings(
    db: Session = Depends(get_db),
    api_key: str = Depends(get_api_key)
):
    rules = load_fee_rules(db)
    logger.info("Fee settings fetched: %d records", len(rules))
    return {"success": True, "fee_settings": rules}


@router.post("/fee-settings", status_code=201)
async def create_fee_setting(
    body: FeeSettingInput,
    db: Session = Depends(get_db),
    api_key: str = Depends(get_api_key)
):
    record = FeeSetting(
        id=f"fee_setting_{uuid.uuid4().hex}",
        created_at=datetime.utcnow(),
        **body.model_dump(),
    )
    db.add(record)
    _commit(db, "create")
    db.refresh(record)
    logger.info("Fee setting created: %s", record.id)
    return {"success": True, "fee_setting": FeeRule.model_validate(record)}


@router.put("/fee-settings/{fee_setting_id}")
async def update_fee_setting(
    fee_setting_id: str,
    body: FeeSettingUpdate,
    db: Session = Depends(get_db),
    api_key: str = Depends(get_api_key)
):
    record = _get_or_404(db, fee_setting_id)
    for field, value in body.model_dump(exclude_unset=True).items():
        setattr(record, field, value)
    record.updated_at = datetime.utcnow()
    _commit(db, "update")
    db.refresh(record)
    logger.info("Fee setting updated: %s", fee_setting_id)
    return {"success": True, "fee_setting": FeeRule.model_validate(record)}


@router.delete("/fee-settings/{fee_setting_id}")
async def delete_fee_setting(
    fee_setting_id: str,
    db: Session = Depends(get_db),
    api_key: str = Depends(get_api_key)
):
    record = _get_or_404(db, fee_setting_id)
    db.delete(record)
    _commit(db, "delete")
    logger.info("Fee setting deleted: %s", fee_setting_id)
    return {"success": True}
