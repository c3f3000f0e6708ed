import uuid
import enum
from sqlalchemy import Column, Integer, Boolean, DateTime, ForeignKey, Text, Index, JSON, Enum, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base, enum_values


class AssistantMessageKind(str, enum.Enum):
    TEXT = "text"
    TOURNAMENT_INFO = "tournament_info"  # selectable tournament list
    PAYMENT_QR = "payment_qr"  # UPI QR for a pending registration
    REGISTRATION_SUCCESS = "registration_success"


class AssistantMessage(Base):
    """One entry of a user's assistant transcript"""
    __tablename__ = "assistant_messages"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)

    is_user = Column(Boolean, default=False, nullable=False)
    kind = Column(
        Enum(AssistantMessageKind, values_callable=enum_values, name="assistant_message_kind"),
        default=AssistantMessageKind.TEXT,
        nullable=False,
    )
    content = Column(Text, nullable=False)
    data = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    # created_at has second resolution on some backends; position keeps transcript order
    position = Column(Integer, nullable=False)

    user = relationship("Profile")

    __table_args__ = (
        Index("ix_assistant_messages_user_position", "user_id", "position", unique=True),
    )

    def __repr__(self):
        return f"<AssistantMessage {self.id} {self.kind}>"
