from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import JSON, Enum, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from contentdesk.db.base import Base, IDMixin, OwnedMixin, TimestampMixin, UTCDateTime
from contentdesk.models.enums import ClientStatus, ContractType, PaymentTerms


class Client(IDMixin, OwnedMixin, TimestampMixin, Base):
    __tablename__ = "clients"
    __table_args__ = (UniqueConstraint("user_id", "email", name="uq_clients_user_id_email"),)

    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(50), default="", nullable=False)
    company: Mapped[str] = mapped_column(String(100), default="", nullable=False)
    website: Mapped[str] = mapped_column(String(255), default="", nullable=False)

    address_street: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    address_city: Mapped[str] = mapped_column(String(100), default="", nullable=False)
    address_state: Mapped[str] = mapped_column(String(100), default="", nullable=False)
    address_zip_code: Mapped[str] = mapped_column(String(20), default="", nullable=False)
    address_country: Mapped[str] = mapped_column(String(100), default="", nullable=False)

    notes: Mapped[str] = mapped_column(Text, default="", nullable=False)
    status: Mapped[ClientStatus] = mapped_column(
        Enum(ClientStatus, name="client_status"),
        default=ClientStatus.ACTIVE,
        nullable=False,
        index=True,
    )
    contract_type: Mapped[ContractType] = mapped_column(
        Enum(ContractType, name="contract_type"),
        default=ContractType.PROJECT,
        nullable=False,
    )
    hourly_rate: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0.00"), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="USD", nullable=False)
    payment_terms: Mapped[PaymentTerms] = mapped_column(
        Enum(PaymentTerms, name="payment_terms"),
        default=PaymentTerms.NET30,
        nullable=False,
    )
    custom_payment_terms: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    tags: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    social_media: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    last_contact: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)
    next_follow_up: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    # Deleting a client detaches its historical projects and invoices.
    projects: Mapped[List["Project"]] = relationship(back_populates="client")
    invoices: Mapped[List["Invoice"]] = relationship(back_populates="client")

    @property
    def address(self) -> dict:
        return {
            "street": self.address_street,
            "city": self.address_city,
            "state": self.address_state,
            "zip_code": self.address_zip_code,
            "country": self.address_country,
        }

    @property
    def full_address(self) -> str:
        parts = [
            self.address_street,
            self.address_city,
            self.address_state,
            self.address_zip_code,
            self.address_country,
        ]
        return ", ".join(part for part in parts if part)
