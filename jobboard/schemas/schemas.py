"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


# ============================================================
# ENUMS
# ============================================================

class ApplicationStatus(str, Enum):
    pending = "pending"
    reviewed = "reviewed"
    approved = "approved"
    rejected = "rejected"


# ============================================================
# AUTH SCHEMAS
# ============================================================

class GoogleAuthRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    access_token: Optional[str] = Field(None, alias="accessToken")
    id_token: Optional[str] = Field(None, alias="idToken")

class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

class PublicUser(BaseModel):
    id: str
    email: str
    name: Optional[str] = None
    is_admin: bool = False
    profile_picture_url: Optional[str] = None

class TokenResponse(BaseModel):
    token: str
    user: PublicUser

class UserDetail(PublicUser):
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class UserEnvelope(BaseModel):
    user: UserDetail


# ============================================================
# PROFILE SCHEMAS
# ============================================================

class ProfileUpdate(BaseModel):
    name: str

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value: Any) -> str:
        name = str(value or "").strip()
        if len(name) < 2:
            raise ValueError("Name too short")
        return name


# ============================================================
# JOB SCHEMAS
# ============================================================

class JobCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str = Field(..., min_length=2)
    description: str = Field(..., min_length=10)
    requirements: str = Field(..., min_length=1)
    qualifications: str = Field(..., min_length=2)
    skills: Optional[str] = None
    experience: Optional[str] = None
    location: str = Field(..., min_length=1)
    salary_range: Optional[str] = None
    is_active: bool = True

class JobUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(None, min_length=2)
    description: Optional[str] = Field(None, min_length=10)
    requirements: Optional[str] = Field(None, min_length=1)
    qualifications: Optional[str] = Field(None, min_length=2)
    skills: Optional[str] = None
    experience: Optional[str] = None
    location: Optional[str] = Field(None, min_length=1)
    salary_range: Optional[str] = None
    is_active: Optional[bool] = None

class JobStatusUpdate(BaseModel):
    is_active: bool = False

class JobRecord(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    title: str
    description: Optional[str] = None
    requirements: Optional[str] = None
    qualifications: Optional[str] = None
    skills: Optional[str] = None
    experience: Optional[str] = None
    location: Optional[str] = None
    salary_range: Optional[str] = None
    is_active: Optional[bool] = None
    posted_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class JobEnvelope(BaseModel):
    job: JobRecord

class JobListResponse(BaseModel):
    jobs: List[JobRecord]


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class ApplicationCreate(BaseModel):
    job_id: UUID
    name: str = Field(..., min_length=2)
    email: EmailStr
    phone: str = Field(..., min_length=5)
    skills: Optional[str] = None
    expected_salary: Optional[str] = None
    cover_letter: Optional[str] = None
    location: Optional[str] = None
    city: Optional[str] = None
    experience: Optional[str] = None
    education: Optional[str] = None
    position_applying: Optional[str] = None

class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus

    @field_validator("status", mode="before")
    @classmethod
    def lower_status(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value

class ApplicationRecord(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    job_id: Optional[str] = None
    user_id: Optional[str] = None
    status: Optional[ApplicationStatus] = None
    resume_path: Optional[str] = None
    applied_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class ApplicationEnvelope(BaseModel):
    application: ApplicationRecord

class ApplicationListResponse(BaseModel):
    applications: List[ApplicationRecord]

class SignedUrlResponse(BaseModel):
    url: str


# ============================================================
# ADMIN SCHEMAS
# ============================================================

class AdminUserRecord(BaseModel):
    id: str
    name: Optional[str] = None
    email: str
    is_admin: bool = False
    created_at: Optional[datetime] = None

class AdminUserListResponse(BaseModel):
    users: List[AdminUserRecord]


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class OkResponse(BaseModel):
    ok: bool = True

class ProfileEnvelope(BaseModel):
    profile: Dict[str, Any]

class ErrorResponse(BaseModel):
    error: str
    details: Optional[List[Dict[str, Any]]] = None
