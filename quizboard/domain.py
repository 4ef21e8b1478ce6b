"""
In-memory quiz types shared by normalization, grading and sessions
"""
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional

MULTIPLE_CHOICE = "multiple_choice"
TRUE_FALSE = "true_false"
SHORT_ANSWER = "short_answer"
ESSAY = "essay"

QUESTION_TYPES = (MULTIPLE_CHOICE, TRUE_FALSE, SHORT_ANSWER, ESSAY)
CHOICE_TYPES = (MULTIPLE_CHOICE, TRUE_FALSE)


@dataclass(frozen=True)
class Option:
    id: str
    option_text: Optional[str]
    is_correct: bool = False


@dataclass
class Question:
    id: str
    question_type: str
    question_text: str
    order_in_quiz: Optional[int] = None
    options: List[Option] = field(default_factory=list)
    correct_answer_index: Optional[int] = None
    correct_answer_text: Optional[str] = None
    image_url: Optional[str] = None
    hint: Optional[str] = None

    def find_option(self, option_id: Any) -> Optional[Option]:
        return next((opt for opt in self.options if opt.id == option_id), None)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Question":
        data = dict(data)
        data["options"] = [Option(**opt) for opt in data.get("options") or []]
        return cls(**data)


@dataclass
class QuizDefinition:
    """A quiz with its questions normalized and in presentation order"""
    id: str
    title: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    pass_score: Optional[int] = None
    questions: List[Question] = field(default_factory=list)

    def get_question(self, question_id: str) -> Optional[Question]:
        return next((q for q in self.questions if q.id == question_id), None)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QuizDefinition":
        data = dict(data)
        data["questions"] = [Question.from_dict(q) for q in data.get("questions") or []]
        return cls(**data)
