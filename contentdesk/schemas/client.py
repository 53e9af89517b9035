from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import EmailStr, Field

from contentdesk.models.enums import ClientStatus, ContractType, PaymentTerms, ProjectStatus
from contentdesk.schemas.base import ORMModel, Pagination


class Address(ORMModel):
    street: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    country: str = ""


class SocialMedia(ORMModel):
    linkedin: str = ""
    twitter: str = ""
    facebook: str = ""
    instagram: str = ""


class ClientBase(ORMModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: str = Field(default="", max_length=50)
    company: str = Field(default="", max_length=100)
    website: str = Field(default="", max_length=255)
    address: Address = Field(default_factory=Address)
    notes: str = Field(default="", max_length=1000)
    status: ClientStatus = ClientStatus.ACTIVE
    contract_type: ContractType = ContractType.PROJECT
    hourly_rate: Decimal = Field(default=Decimal("0.00"), ge=0)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    payment_terms: PaymentTerms = PaymentTerms.NET30
    custom_payment_terms: str = Field(default="", max_length=255)
    tags: List[str] = Field(default_factory=list)
    social_media: SocialMedia = Field(default_factory=SocialMedia)
    last_contact: Optional[datetime] = None
    next_follow_up: Optional[datetime] = None


class ClientCreate(ClientBase):
    pass


class ClientUpdate(ORMModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=50)
    company: Optional[str] = Field(default=None, max_length=100)
    website: Optional[str] = Field(default=None, max_length=255)
    address: Optional[Address] = None
    notes: Optional[str] = Field(default=None, max_length=1000)
    status: Optional[ClientStatus] = None
    contract_type: Optional[ContractType] = None
    hourly_rate: Optional[Decimal] = Field(default=None, ge=0)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    payment_terms: Optional[PaymentTerms] = None
    custom_payment_terms: Optional[str] = Field(default=None, max_length=255)
    tags: Optional[List[str]] = None
    social_media: Optional[SocialMedia] = None
    last_contact: Optional[datetime] = None
    next_follow_up: Optional[datetime] = None


class ClientRead(ClientBase):
    id: int
    user_id: int
    email: str
    full_address: str = ""
    projects_count: int = 0
    created_at: datetime
    updated_at: datetime


class ClientProjectPreview(ORMModel):
    id: int
    title: str
    status: ProjectStatus
    due_date: datetime
    progress: int


class ClientDetail(ORMModel):
    client: ClientRead
    recent_projects: List[ClientProjectPreview] = Field(default_factory=list)


class ClientListResponse(ORMModel):
    clients: List[ClientRead]
    pagination: Pagination


class ClientStats(ORMModel):
    total_clients: int
    active_clients: int
    prospect_clients: int
    new_clients_this_month: int
