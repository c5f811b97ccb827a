from datetime import datetime
from sqlalchemy import Boolean, CheckConstraint, Column, Date, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from signage_cms.db import Base

ASSIGNMENT_TYPES = ("Customer", "Site", "Player")


class Schedule(Base):
    __tablename__ = "schedule"
    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_id = Column(Integer, ForeignKey("customer.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    layout_id = Column(Integer, ForeignKey("layout.id"), nullable=False)
    priority = Column(Integer, nullable=False, default=50)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    start_time = Column(String(8), nullable=True)  # HH:MM:SS
    end_time = Column(String(8), nullable=True)  # HH:MM:SS
    days_of_week = Column(String(32), nullable=True)  # CSV: Mon,Tue,...
    is_active = Column(Boolean, nullable=False, default=True)
    created_by = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    assignments = relationship(
        "ScheduleAssignment",
        back_populates="schedule",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ScheduleAssignment.id",
    )


class ScheduleAssignment(Base):
    __tablename__ = "schedule_assignment"
    __table_args__ = (
        CheckConstraint(
            "assignment_type IN (" + ", ".join(f"'{kind}'" for kind in ASSIGNMENT_TYPES) + ")",
            name="ck_schedule_assignment_type",
        ),
    )
    id = Column(Integer, primary_key=True, autoincrement=True)
    schedule_id = Column(Integer, ForeignKey("schedule.id", ondelete="CASCADE"), nullable=False, index=True)
    assignment_type = Column(String(16), nullable=False)  # Customer | Site | Player
    target_customer_id = Column(Integer, ForeignKey("customer.id", ondelete="CASCADE"), nullable=True)
    target_site_id = Column(Integer, ForeignKey("site.id", ondelete="CASCADE"), nullable=True)
    target_player_id = Column(Integer, ForeignKey("player.id", ondelete="CASCADE"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    schedule = relationship("Schedule", back_populates="assignments")
