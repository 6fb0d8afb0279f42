"""
Document Schemas for BinWatch

Each Pydantic model corresponds to a document store collection
(lowercased class name). Used to validate and normalise documents
before they are written.
"""
from datetime import datetime
from typing import Optional, Literal

from pydantic import BaseModel, Field, EmailStr, field_validator

from config.settings import BIN_DEFAULT_CAPACITY, BIN_MIN_CAPACITY
from fill_model.classifier import clamp_level

WasteType = Literal["General Waste", "Recyclable", "Medical Waste", "Organic"]
BinStatus = Literal["active", "inactive", "maintenance"]
ReportType = Literal[
    "bin_full", "bin_damaged", "unsanitary_condition", "missing_bin",
    "collection_missed", "illegal_dumping", "other",
]
ReportStatus = Literal["pending", "in_progress", "resolved", "rejected"]
ReportPriority = Literal["low", "medium", "high", "critical"]
NoticePriority = Literal["low", "medium", "high", "urgent"]
NoticeType = Literal["announcement", "schedule", "alert", "maintenance", "general"]
NoticeStatus = Literal["active", "inactive", "expired"]
Audience = Literal["all", "public", "collectors", "admins"]


class Location(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    address: str = Field(..., min_length=1)


class ReportLocation(BaseModel):
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    address: Optional[str] = None


class SensorSample(BaseModel):
    rawDistance: float = Field(..., ge=0)
    calculatedLevel: int
    timestamp: Optional[float] = Field(None, description="Device timestamp (ms)")
    batteryLevel: Optional[float] = None
    signalStrength: Optional[float] = None


class Bin(BaseModel):
    """
    Physical bin and its last-known sensor state
    Collection: "bin"
    """
    binId: str = Field(..., min_length=1)
    location: Location
    area: str = Field(..., min_length=1)
    level: int = Field(0, description="Clamped to 0-100 on write")
    distance: Optional[float] = Field(None, ge=0)
    capacity: int = Field(BIN_DEFAULT_CAPACITY, ge=BIN_MIN_CAPACITY)
    type: WasteType = "General Waste"
    status: BinStatus = "active"
    sensorStatus: Literal["active", "warning"] = "active"
    lastUpdated: Optional[datetime] = None
    lastCollected: Optional[datetime] = None
    sensorData: Optional[SensorSample] = None
    collectionSchedule: str = "Daily 6:00 AM"

    @field_validator("binId")
    @classmethod
    def _upper(cls, v):
        v = v.strip().upper()
        if not v:
            raise ValueError("binId is blank")
        return v

    @field_validator("level", mode="before")
    @classmethod
    def _clamp(cls, v):
        return clamp_level(v if v is not None else 0)


class Report(BaseModel):
    """
    Public issue report
    Collection: "report"
    """
    reportType: ReportType
    description: str = Field(..., min_length=1, max_length=500)
    location: Optional[ReportLocation] = None
    binId: Optional[str] = None
    reportedBy: Optional[str] = None
    status: ReportStatus = "pending"
    priority: ReportPriority = "medium"
    resolvedBy: Optional[str] = None
    resolvedAt: Optional[datetime] = None
    resolutionNotes: Optional[str] = None
    createdAt: Optional[datetime] = None

    @field_validator("binId")
    @classmethod
    def _upper(cls, v):
        return v.strip().upper() if v else None


class Notice(BaseModel):
    """
    Administrator announcement
    Collection: "notice"
    """
    title: str = Field(..., min_length=1, max_length=100)
    content: str = Field(..., min_length=1, max_length=1000)
    priority: NoticePriority = "medium"
    type: NoticeType = "general"
    createdBy: Optional[str] = None
    status: NoticeStatus = "active"
    expiryDate: Optional[datetime] = None
    targetAudience: Audience = "all"
    createdAt: Optional[datetime] = None


class User(BaseModel):
    """
    Account (public or admin)
    Collection: "user"
    """
    email: EmailStr
    name: str = Field(..., min_length=1)
    password_hash: str
    userType: Literal["public", "admin"] = "public"
    is_active: bool = True
