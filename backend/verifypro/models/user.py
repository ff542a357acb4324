from sqlalchemy import Column, Text
from sqlalchemy.orm import relationship
from verifypro.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Text, primary_key=True)
    email = Column(Text, nullable=False, unique=True)
    name = Column(Text, nullable=False)
    role = Column(Text, nullable=False)
    password_hash = Column(Text, nullable=False)
    created_at = Column(Text, nullable=False)

    documents = relationship("Document", back_populates="candidate", foreign_keys="Document.candidate_id")
    trusted_source_link = relationship(
        "TrustedSourceLink", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
