# src/modules/contracts/models/signature.py

from sqlalchemy import Column, Integer, ForeignKey, DateTime, String, Text, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from enum import Enum as PyEnum
from database import Base

ROLE_MAX_LENGTH = 100

class SignerParty(PyEnum):
    CUSTOMER = "CUSTOMER"
    COMPANY = "COMPANY"

class Signature(Base):
    __tablename__ = "signatures"
    __table_args__ = (
        UniqueConstraint("contract_id", "role", name="uq_signatures_contract_role"),
    )

    id              = Column(Integer, primary_key=True)
    contract_id     = Column(Integer, ForeignKey("contracts.id"), nullable=False)
    role            = Column(String(ROLE_MAX_LENGTH), nullable=False)
    signature_image = Column(Text, nullable=False)
    signer_name     = Column(String(255), nullable=True)
    signer_title    = Column(String(255), nullable=True)
    party           = Column(Enum(SignerParty), nullable=False)
    signed_at       = Column(DateTime, default=datetime.utcnow, nullable=False)

    contract = relationship("Contract", back_populates="signatures")
