"""
Pydantic schemas for quiz and quiz-session requests and responses
"""
from pydantic import BaseModel, Field
from typing import List, Dict, Any, Optional
from datetime import datetime


class OptionView(BaseModel):
    """Selectable option, without correctness data"""
    id: str
    option_text: Optional[str] = None


class QuestionView(BaseModel):
    """Question as presented to the learner"""
    id: str
    question_type: str
    question_text: Optional[str] = None
    image_url: Optional[str] = None
    options: List[OptionView] = []


class QuizView(BaseModel):
    """Quiz with its questions in presentation order"""
    id: str
    title: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    pass_score: Optional[int] = None
    questions: List[QuestionView]


class QuizListItem(BaseModel):
    """Quiz summary for the catalogue"""
    id: str
    title: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    pass_score: Optional[int] = None
    created_at: Optional[datetime] = None
    question_count: int
    
    class Config:
        from_attributes = True


class QuizListResponse(BaseModel):
    """Paged quiz catalogue"""
    items: List[QuizListItem]
    total: int
    page: int
    page_size: int


class AnswerRequest(BaseModel):
    """Answer for the current question: an option id or short-answer text"""
    value: str = Field(..., description="Option id for choice questions, text otherwise")
    generation: Optional[int] = Field(None, ge=1, description="Session generation the client is on")


class AdvanceRequest(BaseModel):
    """Next / Submit on the current question"""
    generation: Optional[int] = Field(None, ge=1)


class QuestionFeedback(BaseModel):
    """Per-question review line"""
    question_id: str
    question_type: Optional[str] = None
    user_answer: Optional[str] = None
    correct_answer: Optional[str] = None
    is_correct: bool
    hint: Optional[str] = None


class ResultsView(BaseModel):
    """Score and review after the last question is submitted"""
    score: int
    total_questions: int
    pass_score: Optional[int] = None
    is_passed: bool
    message: str
    feedback: Dict[str, Dict[str, Any]]
    breakdown: List[QuestionFeedback]


class SessionView(BaseModel):
    """Current state of a quiz session"""
    session_id: str
    quiz_id: str
    quiz_title: str
    state: str
    generation: int
    cursor: int
    total_questions: int
    current_question: Optional[QuestionView] = None
    current_answer: Optional[Any] = None
    can_advance: bool = False
    is_last_question: bool = False
    results: Optional[ResultsView] = None


class SubmissionView(BaseModel):
    """Outcome of recording a submitted attempt"""
    recorded: bool
    attempt_id: Optional[str] = None
    bonus_awarded: bool = False
    bonus_points: int = 0
    already_submitted: bool = Field(False, description="This run was recorded by an earlier request")


class AdvanceResponse(BaseModel):
    """Response to Next / Submit"""
    session: SessionView
    submission: Optional[SubmissionView] = None
