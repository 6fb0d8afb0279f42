"""
BinWatch — API Server (Transport Layer)
=========================================
FastAPI transport layer. No decision rules live here.
  - Validates request bodies, maps the error taxonomy to HTTP
  - ESP32 devices post fill-level readings
  - Public users file reports, admins publish notices and resolve reports
  - Read paths degrade to sample data when the store is unreachable
"""
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Optional, Literal

from fastapi import FastAPI, APIRouter, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from config.settings import SERVER_HOST, SERVER_PORT, API_PREFIX
from store.database import create_store
from store.errors import BinWatchError, StoreUnavailable
from workflow import accounts, analytics, bins, notices, reports

log = logging.getLogger("binwatch.api")

app = FastAPI(title="BinWatch", version="1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ═══════════════════════════════════════════════════════════════════════════
# GLOBAL STATE — the only shared mutable resource is the store
# ═══════════════════════════════════════════════════════════════════════════
store = create_store()


# ═══════════════════════════════════════════════════════════════════════════
# ERROR MAPPING
# ═══════════════════════════════════════════════════════════════════════════

@app.exception_handler(BinWatchError)
async def binwatch_error_handler(request: Request, exc: BinWatchError):
    if exc.status_code >= 500:
        log.error(f"{request.method} {request.url.path} → {exc.status_code}: {exc}")
    else:
        log.info(f"{request.method} {request.url.path} → {exc.status_code} {exc.code}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.code})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    log.info(f"400 {request.method} {request.url.path}: {errors}")
    code = "invalid_body"
    if errors:
        loc = [str(p) for p in errors[0].get("loc", ()) if p != "body"]
        if loc:
            prefix = "missing" if errors[0].get("type") == "missing" else "invalid"
            code = f"{prefix}_{loc[0]}"
    return JSONResponse(status_code=400, content={"error": code})


# ═══════════════════════════════════════════════════════════════════════════
# REQUEST MODELS
# ═══════════════════════════════════════════════════════════════════════════
class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    userType: Optional[Literal["public", "admin"]] = None

class RegisterRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None

class SensorReading(BaseModel):
    level: float = Field(..., ge=0, le=100)
    distance: float = Field(..., ge=0)
    timestamp: Optional[float] = None     # device clock, ms
    battery: Optional[float] = Field(None, ge=0, le=100)
    signal: Optional[float] = None        # dBm
    sensorStatus: Optional[Literal["active", "warning"]] = None

class BinCreate(BaseModel):
    binId: str
    location: dict
    area: Optional[str] = None
    capacity: Optional[int] = None
    type: Optional[str] = None

class NoticeCreate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    priority: Optional[str] = None
    adminId: Optional[str] = None
    type: Optional[str] = None
    expiryDate: Optional[datetime] = None
    targetAudience: Optional[str] = None

class ReportCreate(BaseModel):
    reportType: Optional[str] = None
    description: Optional[str] = None
    location: Optional[dict] = None
    binId: Optional[str] = None
    reportedBy: Optional[str] = None
    priority: Optional[str] = None

class ResolveRequest(BaseModel):
    resolvedBy: Optional[str] = None
    resolutionNotes: Optional[str] = None


router = APIRouter(prefix=API_PREFIX)


# ═══════════════════════════════════════════════════════════════════════════
# HEALTH
# ═══════════════════════════════════════════════════════════════════════════

@app.get("/health")
@router.get("/health")
def health_check():
    connected = store.ping()
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "store": "connected" if connected else "disconnected",
        "storeConnected": connected,
        "backend": store.name,
    }


@router.get("/esp32/health")
def esp32_health():
    """Device-facing check: lists the endpoints a sensor node talks to."""
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "server": "BinWatch API",
        "endpoints": {
            "updateLevel": f"{API_PREFIX}/bins/{{binId}}/update-level",
            "getRealtime": f"{API_PREFIX}/bins/{{binId}}/realtime",
        },
    }


# ═══════════════════════════════════════════════════════════════════════════
# AUTH (store-backed only)
# ═══════════════════════════════════════════════════════════════════════════

@router.post("/auth/login")
def login(req: LoginRequest):
    user = accounts.login(store, req.email, req.password, req.userType)
    return {"success": True, "user": user, "message": "Login successful"}


@router.post("/auth/register", status_code=201)
def register(req: RegisterRequest):
    user = accounts.register(store, req.email, req.password, req.name)
    return {"success": True, "user": user, "message": "Registration successful"}


# ═══════════════════════════════════════════════════════════════════════════
# BINS
# ═══════════════════════════════════════════════════════════════════════════

@router.get("/bins")
def list_bins():
    try:
        return bins.list_bins(store)
    except StoreUnavailable:
        log.warning("Returning sample bins (store offline)")
        return bins.sample_bins()


@router.post("/bins", status_code=201)
def create_bin(req: BinCreate):
    payload = {k: v for k, v in req.model_dump().items() if v is not None}
    payload.setdefault("area", req.location.get("address") or req.binId)
    return {"success": True, "bin": bins.create_bin(store, payload)}


@router.get("/bins/{bin_id}")
def get_bin(bin_id: str):
    try:
        return bins.get_bin(store, bin_id)
    except StoreUnavailable:
        for sample in bins.sample_bins():
            if sample["binId"] == bin_id.upper():
                return sample
        raise


@router.post("/bins/{bin_id}/update-level")
def update_bin_level(bin_id: str, reading: SensorReading):
    """ESP32 ingest: upsert the bin with the latest reading."""
    doc = bins.report_sensor_reading(
        store, bin_id, reading.level, reading.distance,
        timestamp=reading.timestamp,
        battery=reading.battery,
        signal=reading.signal,
        sensor_status=reading.sensorStatus,
    )
    return {"success": True, "message": "Bin level updated successfully", "bin": doc}


@router.get("/bins/{bin_id}/realtime")
def get_bin_realtime(bin_id: str):
    try:
        return bins.realtime_snapshot(store, bin_id)
    except StoreUnavailable:
        return {
            "binId": bin_id.upper(),
            "level": 45,
            "distance": 55,
            "status": "demo_mode",
            "lastUpdated": datetime.now(timezone.utc).isoformat(),
        }


@router.post("/bins/{bin_id}/collect")
def confirm_collection(bin_id: str):
    """Crew confirmed collection at a bin."""
    return {"success": True, "bin": bins.mark_collected(store, bin_id)}


# ═══════════════════════════════════════════════════════════════════════════
# NOTICES
# ═══════════════════════════════════════════════════════════════════════════

@router.get("/notices")
def list_notices():
    try:
        return notices.list_active_notices(store)
    except StoreUnavailable:
        return notices.sample_notices()


@router.post("/notices", status_code=201)
def create_notice(req: NoticeCreate):
    notice = notices.create_notice(
        store, req.title, req.content, req.priority, req.adminId,
        notice_type=req.type, expiry=req.expiryDate, audience=req.targetAudience,
    )
    return {"success": True, "notice": notice}


# ═══════════════════════════════════════════════════════════════════════════
# REPORTS
# ═══════════════════════════════════════════════════════════════════════════

@router.get("/reports")
def list_reports(status: Optional[str] = Query(default=None)):
    try:
        return reports.list_reports(store, status)
    except StoreUnavailable:
        return []


@router.post("/reports", status_code=201)
def create_report(req: ReportCreate):
    report = reports.create_report(
        store, req.reportType, req.description,
        location=req.location, bin_id=req.binId,
        reported_by=req.reportedBy, priority=req.priority,
    )
    return {"success": True, "report": report}


@router.patch("/reports/{report_id}/resolve")
def resolve_report(report_id: str, req: Optional[ResolveRequest] = None):
    req = req or ResolveRequest()
    report = reports.resolve_report(store, report_id, req.resolvedBy, req.resolutionNotes)
    return {"success": True, "report": report}


# ═══════════════════════════════════════════════════════════════════════════
# ANALYTICS
# ═══════════════════════════════════════════════════════════════════════════

@router.get("/analytics/dashboard")
def get_dashboard():
    try:
        return analytics.dashboard(store)
    except StoreUnavailable:
        return analytics.sample_dashboard()


app.include_router(router)


@app.exception_handler(404)
async def not_found_handler(request: Request, exc):
    # unknown routes get the same error envelope as missing entities
    return JSONResponse(status_code=404, content={"error": "route_not_found"})


# ═══════════════════════════════════════════════════════════════════════════
# STARTUP
# ═══════════════════════════════════════════════════════════════════════════

def seed_defaults(target=None):
    """Admin account, sample bins and sample notices on an empty store."""
    target = target or store
    admin = accounts.seed_admin(target)
    seeded = bins.seed_sample_bins(target)
    if admin:
        notices.seed_sample_notices(target, admin["id"])
    return seeded


def prepare_store(target=None):
    """Indexes and default data, skipped when the store is unreachable. Blocking."""
    target = target or store
    if not target.ping():
        print("  Store           : ✗ unreachable (serving sample data on reads)")
        return None
    target.ensure_indexes()
    try:
        seeded = seed_defaults(target)
        print(f"  Sample bins     : {seeded} inserted")
        return seeded
    except StoreUnavailable as e:
        log.error(f"Seeding skipped: {e}")
        return None


@app.on_event("startup")
async def startup():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    print("═" * 55)
    print("  BinWatch — API Server v1.0")
    print("═" * 55)
    print(f"  API base        : http://localhost:{SERVER_PORT}{API_PREFIX}")
    print(f"  ESP32 update    : POST {API_PREFIX}/bins/{{binId}}/update-level")
    print(f"  Store backend   : {store.name}")
    # pymongo calls block
    await run_in_threadpool(prepare_store)


# ═══════════════════════════════════════════════════════════════════════════
# RUN
# ═══════════════════════════════════════════════════════════════════════════

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("api.server:app", host=SERVER_HOST, port=SERVER_PORT, reload=False)
