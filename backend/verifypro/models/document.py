from sqlalchemy import Column, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from verifypro.database import Base


class Document(Base):
    __tablename__ = "documents"

    id = Column(Text, primary_key=True)
    document_id = Column(Text, nullable=False, unique=True)
    candidate_id = Column(Text, ForeignKey("users.id"), nullable=False)
    uploaded_by = Column(Text, ForeignKey("users.id"), nullable=False)
    file_name = Column(Text, nullable=False)
    doc_type = Column(Text, nullable=False)
    mime_type = Column(Text)
    file_size_bytes = Column(Integer)
    file_hash = Column(Text)
    stored_path = Column(Text, unique=True)
    upload_date = Column(Text, nullable=False)
    source = Column(Text, nullable=False, default="manual")
    issuer = Column(Text)
    issue_date = Column(Text)
    status = Column(Text, nullable=False, default="pending")
    confidence_score = Column(Integer, nullable=False, default=0)
    decided_by = Column(Text)
    notes = Column(Text)
    reviewer_notes = Column(Text)
    verification_details = Column(Text)  # JSON
    request_id = Column(Text, ForeignKey("document_requests.id"))
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)

    candidate = relationship("User", back_populates="documents", foreign_keys=[candidate_id])
    request = relationship("DocumentRequest", foreign_keys=[request_id])
