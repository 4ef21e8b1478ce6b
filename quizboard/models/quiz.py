"""
Quiz and QuizQuestion models - quiz definitions and their ordered questions
"""
from sqlalchemy import Column, String, Integer, Text, TIMESTAMP, ForeignKey, func
from sqlalchemy.orm import relationship
from quizboard.database import Base
import uuid


def _new_id() -> str:
    return str(uuid.uuid4())


class Quiz(Base):
    """
    Quizzes table - quiz metadata and pass threshold
    """
    __tablename__ = "quizzes"
    
    id = Column(String(36), primary_key=True, default=_new_id)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    image_url = Column(Text)
    pass_score = Column(Integer, nullable=True)  # NULL means no pass/fail gate
    created_at = Column(TIMESTAMP, server_default=func.now())
    
    questions = relationship(
        "QuizQuestion",
        back_populates="quiz",
        cascade="all, delete-orphan"
    )
    
    def __repr__(self):
        return f"<Quiz(id={self.id}, title={self.title}, pass_score={self.pass_score})>"


class QuizQuestion(Base):
    """
    Quiz questions table - options are stored as they were authored
    (usually stringified JSON) and normalized when a quiz is loaded
    """
    __tablename__ = "quiz_questions"
    
    id = Column(String(36), primary_key=True, default=_new_id)
    quiz_id = Column(String(36), ForeignKey("quizzes.id"), nullable=False, index=True)
    question_text = Column(Text, nullable=False)
    question_type = Column(String(20), nullable=False, default="multiple_choice")
    order_in_quiz = Column(Integer)
    options = Column(Text)  # '["A", "B"]' or '[{"id": ..., "option_text": ..., "is_correct": ...}]'
    correct_answer_index = Column(Integer)
    correct_answer_text = Column(Text)
    image_url = Column(Text)
    hint = Column(Text)
    
    quiz = relationship("Quiz", back_populates="questions")
    
    def __repr__(self):
        return f"<QuizQuestion(id={self.id}, quiz_id={self.quiz_id}, type={self.question_type})>"
