from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
import logging

from clinic_billing.clinic_database import get_db, TreatmentRecord
from clinic_billing.dependencies import get_api_key
from clinic_billing.model import VisitBilling, VisitBillingInput
from clinic_billing.router.fee_settings import load_fee_rules
from clinic_billing.rule_loader import get_category_map, get_products_response
from clinic_billing.services.visit_billing import bill_visit

router = APIRouter(tags=["Treatments"])
logger = logging.getLogger(__name__)


@router.get("/treatment-products")
async def list_treatment_products(api_key: str = Depends(get_api_key)):
    return get_products_response()


@router.post("/treatments/fee-preview", response_model=VisitBilling)
async def preview_treatment_fee(
    visit: VisitBillingInput,
    db: Session = Depends(get_db),
    api_key: str = Depends(get_api_key)
):
    return bill_visit(visit, load_fee_rules(db), get_category_map())


@router.post("/treatments", status_code=201)
async def create_treatment(
    visit: VisitBillingInput,
    db: Session = Depends(get_db),
    api_key: str = Depends(get_api_key)
):
    if not visit.doctor_id:
        raise HTTPException(status_code=400, detail="Doctor is required")
    if not visit.lines:
        raise HTTPException(status_code=400, detail="At least one treatment is required")

    billing = bill_visit(visit, load_fee_rules(db), get_category_map())
    summary = billing.summary

    record = TreatmentRecord(
        patient_id=visit.patient_id,
        doctor_id=visit.doctor_id,
        payment_status=summary.payment_status.value,
        dp_amount=summary.dp_amount,
        subtotal=summary.subtotal,
        total_discount=summary.total_discount,
        admin_fee=summary.admin_fee,
        medication_cost=summary.medication_cost,
        total_tindakan=summary.total_tindakan,
        outstanding_amount=summary.outstanding_amount,
        total_fee=billing.fees.totals.total_fee,
        lines=[line.model_dump(mode="json") for line in visit.lines],
        fee_details=[d.model_dump(mode="json") for d in billing.fees.details],
    )
    db.add(record)
    try:
        db.commit()
        db.refresh(record)
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Failed to save treatment: {str(e)}")

    logger.info("Treatment %s saved for patient %s (fee %.2f)",
                record.id, record.patient_id, billing.fees.totals.total_fee)
    return {"id": record.id, "billing": billing}


@router.get("/treatments/{treatment_id}")
async def get_treatment(
    treatment_id: int,
    db: Session = Depends(get_db),
    api_key: str = Depends(get_api_key)
):
    record = db.query(TreatmentRecord).filter(TreatmentRecord.id == treatment_id).first()
    if not record:
        raise HTTPException(status_code=404, detail="Treatment not found")

    return {
        "id": record.id,
        "patient_id": record.patient_id,
        "doctor_id": record.doctor_id,
        "payment_status": record.payment_status,
        "dp_amount": float(record.dp_amount or 0),
        "total_tindakan": float(record.total_tindakan or 0),
        "outstanding_amount": float(record.outstanding_amount or 0),
        "total_fee": float(record.total_fee or 0),
        "lines": record.lines,
        "fee_details": record.fee_details,
        "created_at": record.created_at,
    }
