import uuid
from sqlalchemy import Column, Text, ForeignKey, Index
from sqlalchemy.orm import relationship

from app.database import Base


class RefreshToken(Base):
    __tablename__ = "refresh_tokens"

    id = Column(Text, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(Text, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # SHA-256 от выданного клиенту секрета, сам секрет не хранится
    token_hash = Column(Text, nullable=False, unique=True)
    # Все токены, полученные ротацией от одного входа, имеют общий family
    family = Column(Text, nullable=False, index=True)
    expires_at = Column(Text, nullable=False)  # UTC ISO timestamp
    created_at = Column(Text, nullable=False)
    revoked_at = Column(Text, nullable=True)

    # Relationships
    user = relationship("User", back_populates="refresh_tokens")

    __table_args__ = (
        Index("idx_refresh_tokens_family_revoked", "family", "revoked_at"),
    )

    @property
    def is_revoked(self) -> bool:
        return self.revoked_at is not None

    def __repr__(self):
        return f"<RefreshToken(id={self.id}, family={self.family}, revoked_at={self.revoked_at})>"
