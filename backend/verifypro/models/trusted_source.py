from sqlalchemy import Column, ForeignKey, Text
from sqlalchemy.orm import relationship
from verifypro.database import Base


class TrustedSourceLink(Base):
    __tablename__ = "trusted_source_links"

    user_id = Column(Text, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    abc_id = Column(Text, nullable=False)
    connected_at = Column(Text, nullable=False)

    user = relationship("User", back_populates="trusted_source_link")
