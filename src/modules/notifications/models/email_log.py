from datetime import datetime
from enum import Enum as PyEnum
from sqlalchemy import Column, Integer, String, DateTime, Enum, ForeignKey
from sqlalchemy.orm import relationship

from database import Base

class EmailKind(PyEnum):
    SIGN_REQUEST = "SIGN_REQUEST"
    CUSTOMER_SIGNED = "CUSTOMER_SIGNED"
    FINAL_DOCUMENT = "FINAL_DOCUMENT"

class EmailLog(Base):
    __tablename__ = 'email_logs'

    id = Column(Integer, primary_key=True)
    contract_id = Column(Integer, ForeignKey('contracts.id'), nullable=False)
    email = Column(String(255), nullable=False)
    kind = Column(Enum(EmailKind), nullable=False)
    subject = Column(String(255), nullable=False)
    sent_at = Column(DateTime, default=datetime.utcnow)
    contract = relationship("Contract")
