"""ReceiptScan model for tracking receipt upload and processing."""

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from pantry_planner.database import Base, TimestampMixin


class ReceiptScan(Base, TimestampMixin):
    """A receipt image queued for parsing by the vision model."""

    __tablename__ = "receipt_scans"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(
        String(20), nullable=False, default="pending"
    )  # pending, processing, completed, failed
    error_message = Column(Text, nullable=True)

    # Items read from the receipt: [{"name", "quantity", "unit"}]. The client
    # reviews them and adds the ones it wants through the bulk endpoint.
    parsed_items = Column(JSON, nullable=True)
    item_count = Column(Integer, nullable=True)

    processed_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    user = relationship("User", backref="receipt_scans")
