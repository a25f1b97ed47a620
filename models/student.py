from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from .base import Base, utcnow


class Student(Base):
     """
     Student model - roster record referenced by invoices and payments.
     class_name is the cohort used by class-wise reports.
     """
     __tablename__ = "students"

     id = Column(Integer, primary_key=True, autoincrement=True)
     admission_number = Column(String(50), unique=True, nullable=False)
     first_name = Column(String(100), nullable=False)
     last_name = Column(String(100), nullable=False)
     class_name = Column(String(50), nullable=False, index=True)
     section = Column(String(20), nullable=True)
     guardian_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
     academic_year = Column(String(20), nullable=False)
     status = Column(String(20), default="active", nullable=False)  # active, inactive, graduated, transferred
     created_at = Column(DateTime, default=utcnow, server_default=func.now(), nullable=False)

     # Relationships
     guardian = relationship("User")
     invoices = relationship("Invoice", back_populates="student")

     def __repr__(self):
          return f"<Student(id={self.id}, name='{self.first_name} {self.last_name}', class='{self.class_name}')>"

     @property
     def full_name(self) -> str:
          return f"{self.first_name} {self.last_name}"
