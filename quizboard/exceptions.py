"""
Custom exceptions for quizboard.

Services raise these; the API layer maps them onto HTTP responses.
"""


class QuizboardError(Exception):
    """Base exception for all quizboard errors."""
    pass


class RecordStoreError(QuizboardError):
    """Raised when the record store rejects or fails a query."""
    pass


class QuizNotFoundError(QuizboardError):
    """Raised when a quiz identifier yields no record."""
    
    def __init__(self, quiz_id: str):
        self.quiz_id = quiz_id
        super().__init__(f"Quiz not found: {quiz_id}")


class QuizLoadError(QuizboardError):
    """Raised when a quiz could not be fetched from the record store."""
    pass


class EmptyQuizError(QuizboardError):
    """Raised when a session is started on a quiz without questions."""
    pass


class SessionNotFoundError(QuizboardError):
    """Raised when a quiz session is unknown or has expired."""
    
    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Quiz session not found: {session_id}")


class SessionStateError(QuizboardError):
    """Raised when an operation is not allowed in the session's current state."""
    pass


class UnansweredQuestionError(SessionStateError):
    """Raised when advancing past a question whose answer slot is empty."""
    
    def __init__(self, question_id: str):
        self.question_id = question_id
        super().__init__(f"Question {question_id} has not been answered")


class StaleSessionError(SessionStateError):
    """Raised when a request targets an older generation of a retaken session."""
    
    def __init__(self, expected: int, received: int):
        self.expected = expected
        self.received = received
        super().__init__(f"Stale session generation {received}, current is {expected}")


class LeaderboardUnavailableError(QuizboardError):
    """Raised when quiz attempts could not be fetched for ranking."""
    pass


class SessionStoreUnavailableError(QuizboardError):
    """Raised when a quiz session could not be written to Redis."""
    pass
