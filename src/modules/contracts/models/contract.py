from sqlalchemy import Column, Integer, String, DateTime, Enum, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from enum import Enum as PyEnum
from database import Base

class ContractStatus(PyEnum):
    PENDING = "PENDING"
    CUSTOMER_SIGNED = "CUSTOMER_SIGNED"
    COMPLETED = "COMPLETED"

class Contract(Base):
    __tablename__ = 'contracts'

    id = Column(Integer, primary_key=True)
    document_id = Column(String(64), unique=True, nullable=False, index=True)
    config = Column(JSON, nullable=False)
    status = Column(Enum(ContractStatus), nullable=False, default=ContractStatus.PENDING)
    company_email = Column(String(255), nullable=True)
    customer_email = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    # Only ever set once, by the finalization pipeline
    final_sent_at = Column(DateTime, nullable=True)

    signatures = relationship(
        "Signature",
        back_populates="contract",
        order_by="Signature.role",
        cascade="all, delete-orphan",
    )
