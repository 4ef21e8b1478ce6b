"""
Quiz grading service
Choice questions: option identity match
Short answer: case-insensitive exact match
Essay: never auto-graded
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from quizboard.domain import Question, CHOICE_TYPES, SHORT_ANSWER, ESSAY

logger = logging.getLogger(__name__)

MANUAL_GRADING_REQUIRED = "Manual grading required"


@dataclass
class GradingResult:
    score: int
    max_score: int
    feedback: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    breakdown: List[Dict[str, Any]] = field(default_factory=list)


def is_passed(score: int, pass_score: Optional[int]) -> bool:
    """A quiz without a pass score has no pass/fail gate and never passes"""
    if pass_score is None:
        return False
    return score >= pass_score


class GradingService:
    """
    Service for grading quiz attempts
    
    Strategy, per question in presentation order:
    - An option flagged correct decides by option id
    - Choice questions without a flagged option fall back to correct_answer_index
    - Short answer compares case-folded text with correct_answer_text
    - Essay is always incorrect; its answer text is surfaced as grading guidance
    
    Grading never raises: missing or oddly shaped answers are simply incorrect.
    """
    
    def grade_quiz(
        self,
        questions: Sequence[Question],
        answers: Mapping[str, Any]
    ) -> GradingResult:
        """
        Grade a complete attempt
        
        Args:
            questions: Normalized questions in presentation order
            answers: Learner's answers {question_id: option_id or text}
            
        Returns:
            GradingResult with score, per-question feedback and breakdown
        """
        
        score = 0
        feedback = {}
        breakdown = []
        
        for question in questions:
            user_answer = answers.get(question.id)
            is_correct, correct_answer = self._grade_question(question, user_answer)
            
            if is_correct:
                score += 1
                entry = {"is_correct": True}
            else:
                entry = {"is_correct": False, "hint": question.hint}
                if question.question_type == ESSAY:
                    entry["grading_guidance"] = correct_answer
            
            feedback[question.id] = entry
            breakdown.append({
                "question_id": question.id,
                "question_type": question.question_type,
                "user_answer": self._display_answer(question, user_answer),
                "correct_answer": correct_answer,
                "is_correct": is_correct,
                "hint": None if is_correct else question.hint
            })
        
        logger.info(f"Quiz graded: {score}/{len(questions)}")
        
        return GradingResult(
            score=score,
            max_score=len(questions),
            feedback=feedback,
            breakdown=breakdown
        )
    
    def _grade_question(self, question: Question, user_answer: Any) -> Tuple[bool, Optional[str]]:
        """Returns (is_correct, correct answer text for review)"""
        
        correct_option = next((opt for opt in question.options if opt.is_correct), None)
        if correct_option is not None:
            return user_answer == correct_option.id, correct_option.option_text
        
        if question.question_type in CHOICE_TYPES:
            return self._grade_by_index(question, user_answer)
        
        if question.question_type == SHORT_ANSWER:
            return self._grade_short_answer(question, user_answer)
        
        if question.question_type == ESSAY:
            return False, question.correct_answer_text or MANUAL_GRADING_REQUIRED
        
        logger.warning(f"Unknown question type {question.question_type!r} for question {question.id}")
        return False, None
    
    def _grade_by_index(self, question: Question, user_answer: Any) -> Tuple[bool, Optional[str]]:
        """Legacy questions: correct_answer_index points into the option list"""
        index = question.correct_answer_index
        
        if isinstance(index, bool) or not isinstance(index, int):
            return False, None
        if not 0 <= index < len(question.options):
            return False, None
        
        correct_option = question.options[index]
        return user_answer == correct_option.id, correct_option.option_text
    
    def _grade_short_answer(self, question: Question, user_answer: Any) -> Tuple[bool, Optional[str]]:
        expected = question.correct_answer_text
        
        if not expected or not isinstance(user_answer, str):
            return False, expected
        
        return user_answer.casefold() == expected.casefold(), expected
    
    def _display_answer(self, question: Question, user_answer: Any) -> Optional[str]:
        if user_answer is None:
            return None
        option = question.find_option(user_answer)
        if option is not None:
            return option.option_text
        return str(user_answer)
    
    def result_message(self, score: int, pass_score: Optional[int]) -> str:
        """Overall message shown with the score"""
        if pass_score is None:
            return "Quiz completed!"
        if is_passed(score, pass_score):
            return "You Passed!"
        return f"You Did Not Pass. Passing score: {pass_score}"


# Global instance
grading_service = GradingService()
