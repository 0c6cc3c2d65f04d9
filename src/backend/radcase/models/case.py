"""
教学病例模型
"""
from sqlalchemy import Column, String, Integer, Text, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime

from .base import Base


class Case(Base):
    """教学病例"""
    __tablename__ = "cases"

    id = Column(String(36), primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    modality = Column(String(20), nullable=True, index=True)  # CT | MRI | X-Ray | US ...
    body_part = Column(String(50), nullable=True, index=True)
    diagnosis = Column(String(200), nullable=True)
    difficulty = Column(Integer, default=2, index=True)  # 1-5
    clinical_history = Column(Text, nullable=True)
    teaching_points = Column(Text, nullable=True)
    findings = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # 关系
    progress = relationship("UserCaseProgress", back_populates="case", cascade="all", passive_deletes=True)

    def to_summary(self) -> dict:
        """病例摘要（用于列表和复习队列）"""
        return {
            "id": self.id,
            "title": self.title,
            "modality": self.modality,
            "body_part": self.body_part,
            "diagnosis": self.diagnosis,
            "difficulty": self.difficulty,
            "clinical_history": self.clinical_history,
            "teaching_points": self.teaching_points,
            "findings": self.findings,
        }

    def __repr__(self):
        return f"<Case(id='{self.id}' title='{self.title}' modality='{self.modality}')>"
