# main.py
from fastapi import FastAPI, Request, HTTPException, Query, Body, Header, Depends
from fastapi.responses import StreamingResponse
from datetime import datetime, time, timedelta, timezone
from typing import List, Optional
from pydantic import BaseModel
from dotenv import load_dotenv
import pandas as pd
import io
import logging
import os

from models import (
    PersonalizedVaccineReminder,
    ReminderCreate,
    ReminderUpdate,
    ScheduleRequest,
    VaccineRecord,
    VerificationReport,
    VerificationResult,
    VerifyManyRequest,
)
from catalog import VaccineCatalog, default_catalog
from schedule_engine import InvalidProfileError, ScheduleEngine
from verification import TrustedSourceVerifier, VerificationCache
from database import ReminderStore, reminder_collection

# Load environment variables
load_dotenv()

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)

VERIFICATION_TTL_DAYS = float(os.getenv("VERIFICATION_TTL_DAYS", "7"))
VERIFICATION_TIMEOUT_SECONDS = float(os.getenv("VERIFICATION_TIMEOUT_SECONDS", "5"))

SCHEDULE_ERROR = "Unable to compute your schedule right now"


def create_app(catalog: Optional[VaccineCatalog] = None, engine: Optional[ScheduleEngine] = None,
               cache: Optional[VerificationCache] = None, store: Optional[ReminderStore] = None) -> FastAPI:
    app = FastAPI(title="Vaccine Schedule Service")

    if catalog is None:
        catalog = default_catalog()
    app.state.catalog = catalog
    app.state.engine = engine if engine is not None else ScheduleEngine(catalog)
    app.state.cache = cache if cache is not None else VerificationCache(
        catalog,
        TrustedSourceVerifier(),
        ttl=timedelta(days=VERIFICATION_TTL_DAYS),
        timeout=VERIFICATION_TIMEOUT_SECONDS,
    )
    app.state.store = store if store is not None else ReminderStore(reminder_collection)

    @app.on_event("startup")
    async def startup_db_client():
        if store is None:
            from database import test_connection
            await test_connection()

    _register_routes(app)
    return app


# --- Dependencies ---

def get_catalog(request: Request) -> VaccineCatalog:
    return request.app.state.catalog

def get_engine(request: Request) -> ScheduleEngine:
    return request.app.state.engine

def get_cache(request: Request) -> VerificationCache:
    return request.app.state.cache

def get_store(request: Request) -> ReminderStore:
    return request.app.state.store

def get_user_id(x_user_id: str = Header(..., description="Opaque user id set by the identity provider")) -> str:
    if not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Missing authenticated user")
    return x_user_id


def _compute_schedule(engine: ScheduleEngine, req: ScheduleRequest) -> List[PersonalizedVaccineReminder]:
    try:
        return engine.generate_schedule(req.dob, req.history, req.conditions)
    except InvalidProfileError as e:
        raise HTTPException(status_code=400, detail=f"{SCHEDULE_ERROR}: {e}")


# Admin cache clearing
class AdminRequest(BaseModel):
    password: str


def _register_routes(app: FastAPI) -> None:

    # --- Catalog ---

    @app.get("/vaccines", response_model=List[VaccineRecord])
    def all_vaccines(catalog: VaccineCatalog = Depends(get_catalog), cache: VerificationCache = Depends(get_cache)):
        return [cache.annotate(v) for v in catalog.get_all()]

    @app.get("/vaccines/search", response_model=List[VaccineRecord])
    def search_vaccines(q: str = Query(..., min_length=1), catalog: VaccineCatalog = Depends(get_catalog),
                        cache: VerificationCache = Depends(get_cache)):
        return [cache.annotate(v) for v in catalog.search(q)]

    @app.get("/vaccines/{vaccine_id}", response_model=VaccineRecord)
    def vaccine_by_id(vaccine_id: str, catalog: VaccineCatalog = Depends(get_catalog),
                      cache: VerificationCache = Depends(get_cache)):
        record = catalog.get_by_id(vaccine_id)
        if record is None:
            raise HTTPException(status_code=404, detail="Vaccine not found")
        return cache.annotate(record)

    # --- Personalized schedule ---

    @app.post("/schedule", response_model=List[PersonalizedVaccineReminder])
    def personalized_schedule(req: ScheduleRequest, engine: ScheduleEngine = Depends(get_engine)):
        return _compute_schedule(engine, req)

    # Export schedule to CSV
    @app.post("/schedule/export")
    def export_schedule(req: ScheduleRequest, engine: ScheduleEngine = Depends(get_engine)):
        reminders = _compute_schedule(engine, req)
        columns = ["vaccineId", "name", "dueDate", "reason", "urgencyLevel", "uiReminderText"]
        df = pd.DataFrame([r.model_dump(mode="json", by_alias=True) for r in reminders], columns=columns)
        stream = io.StringIO()
        df.to_csv(stream, index=False)
        stream.seek(0)
        return StreamingResponse(stream, media_type="text/csv", headers={
            "Content-Disposition": "attachment; filename=vaccine_schedule.csv"
        })

    # Save dated reminders into the user's reminder list
    @app.post("/schedule/reminders", status_code=201)
    async def save_schedule_reminders(req: ScheduleRequest, engine: ScheduleEngine = Depends(get_engine),
                                      store: ReminderStore = Depends(get_store), user_id: str = Depends(get_user_id)):
        reminders = _compute_schedule(engine, req)
        saved = []
        for r in reminders:
            if r.due_date is None:
                continue
            saved.append(await store.create(user_id, ReminderCreate(
                title=f"Vaccination: {r.name}",
                description=r.ui_reminder_text,
                reminder_type="vaccination",
                scheduled_at=datetime.combine(r.due_date, time(9, 0), tzinfo=timezone.utc),
            )))
        logger.info("Saved %d of %d schedule reminders", len(saved), len(reminders))
        return saved

    # --- Verification ---

    @app.get("/verification/report", response_model=VerificationReport)
    async def verification_report(catalog: VaccineCatalog = Depends(get_catalog),
                                  cache: VerificationCache = Depends(get_cache)):
        return await cache.report(catalog.get_all())

    @app.get("/verification/stats")
    def verification_stats(cache: VerificationCache = Depends(get_cache)):
        return cache.stats()

    @app.delete("/verification/cache")
    def clear_verification_cache(request: AdminRequest = Body(...), vaccine_id: Optional[str] = None,
                                 cache: VerificationCache = Depends(get_cache)):
        admin_password = os.getenv("ADMIN_PASSWORD")

        if not admin_password:
            raise HTTPException(status_code=500, detail="Admin password not configured on server")

        if request.password != admin_password:
            raise HTTPException(status_code=401, detail="Unauthorized: Invalid admin password")

        cache.clear(vaccine_id)
        return {"message": "Verification cache cleared"}

    @app.get("/verification/{vaccine_id}", response_model=VerificationResult)
    async def verify_vaccine(vaccine_id: str, cache: VerificationCache = Depends(get_cache)):
        return await cache.verify(vaccine_id)

    @app.post("/verification", response_model=List[VerificationResult])
    async def verify_vaccines(req: VerifyManyRequest, cache: VerificationCache = Depends(get_cache)):
        return await cache.verify_all(req.vaccine_ids)

    # --- Reminder records ---

    @app.post("/reminders", status_code=201)
    async def create_reminder(reminder: ReminderCreate, store: ReminderStore = Depends(get_store),
                              user_id: str = Depends(get_user_id)):
        return await store.create(user_id, reminder)

    @app.get("/reminders")
    async def list_reminders(store: ReminderStore = Depends(get_store), user_id: str = Depends(get_user_id)):
        return await store.list(user_id)

    @app.get("/reminders/{reminder_id}")
    async def get_reminder(reminder_id: str, store: ReminderStore = Depends(get_store),
                           user_id: str = Depends(get_user_id)):
        reminder = await store.get(user_id, reminder_id)
        if reminder is None:
            raise HTTPException(status_code=404, detail="Reminder not found")
        return reminder

    @app.patch("/reminders/{reminder_id}")
    async def update_reminder(reminder_id: str, changes: ReminderUpdate, store: ReminderStore = Depends(get_store),
                              user_id: str = Depends(get_user_id)):
        reminder = await store.update(user_id, reminder_id, changes)
        if reminder is None:
            raise HTTPException(status_code=404, detail="Reminder not found")
        return reminder

    @app.delete("/reminders/{reminder_id}")
    async def delete_reminder(reminder_id: str, store: ReminderStore = Depends(get_store),
                              user_id: str = Depends(get_user_id)):
        if not await store.delete(user_id, reminder_id):
            raise HTTPException(status_code=404, detail="Reminder not found")
        return {"message": "Reminder deleted successfully"}

    @app.get("/healthz")
    async def healthz():
        return {"ok": True}


app = create_app()
