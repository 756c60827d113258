import logging
from fastapi import FastAPI

from clinic_billing.router.fee_settings import router as fee_settings_router
from clinic_billing.router.treatments import router as treatments_router

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = FastAPI(title="Clinic Treatment Billing API")

app.include_router(fee_settings_router, prefix="/api")
app.include_router(treatments_router, prefix="/api")
