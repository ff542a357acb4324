from sqlalchemy import Column, ForeignKey, Text
from sqlalchemy.orm import relationship
from verifypro.database import Base


class DocumentRequest(Base):
    __tablename__ = "document_requests"

    id = Column(Text, primary_key=True)
    requester_id = Column(Text, ForeignKey("users.id"), nullable=False)
    candidate_id = Column(Text, ForeignKey("users.id"), nullable=False)
    doc_type = Column(Text, nullable=False)
    notes = Column(Text)
    request_date = Column(Text, nullable=False)
    due_date = Column(Text)
    status = Column(Text, nullable=False, default="open")
    fulfilled_document_id = Column(Text)
    fulfilled_at = Column(Text)

    requester = relationship("User", foreign_keys=[requester_id])
    candidate = relationship("User", foreign_keys=[candidate_id])
