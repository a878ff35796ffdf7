"""
Database models for the onboarding portal.
Uses SQLAlchemy with async support.
"""
from datetime import datetime
from typing import Optional
from sqlalchemy import String, DateTime, Boolean, Integer, JSON, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class OnboardingRecordRow(Base):
    """One onboarding document per portal user."""
    __tablename__ = "onboarding_records"
    
    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    employee_id: Mapped[Optional[str]] = mapped_column(
        String(32), 
        nullable=True, 
        index=True
    )
    document: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    
    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime, 
        nullable=False, 
        server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, 
        nullable=False, 
        server_default=func.now()
    )
    last_login_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime, 
        nullable=True
    )
    
    def __repr__(self) -> str:
        return f"<OnboardingRecordRow(user_id={self.user_id}, employee_id={self.employee_id})>"


class AllowedEmployee(Base):
    """Employee ID permitted to register."""
    __tablename__ = "allowed_employees"
    
    employee_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, 
        nullable=False, 
        server_default=func.now()
    )
    
    def __repr__(self) -> str:
        return f"<AllowedEmployee(employee_id={self.employee_id}, active={self.active})>"


class SupportTicket(Base):
    """Question sent to HR from the help screen."""
    __tablename__ = "support_tickets"
    
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    employee_id: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    category: Mapped[str] = mapped_column(String(64), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        String(16), 
        nullable=False, 
        default="open", 
        index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, 
        nullable=False, 
        server_default=func.now()
    )
    
    def __repr__(self) -> str:
        return f"<SupportTicket(id={self.id}, user_id={self.user_id}, status={self.status})>"
