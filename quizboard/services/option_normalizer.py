"""
Option normalization

Quiz question options are authored in more than one encoding. They are decoded
once, when the quiz loads, into one of the variants below:

- NoOptions: short answer questions, never selectable
- StringOptions: ["A", "B", "C"] with correctness from correct_answer_index
- ObjectOptions: [{"id", "option_text", "is_correct"}, ...]
- MalformedOptions: anything else, shown as a single non-correct sentinel
  option so one broken question does not block the rest of the quiz
"""
import json
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Union

from quizboard.domain import Option, SHORT_ANSWER

logger = logging.getLogger(__name__)

ERROR_OPTION_ID = "error_opt"
ERROR_OPTION_TEXT = "Error parsing options"


@dataclass(frozen=True)
class NoOptions:
    @property
    def options(self) -> List[Option]:
        return []


@dataclass(frozen=True)
class StringOptions:
    options: List[Option] = field(default_factory=list)


@dataclass(frozen=True)
class ObjectOptions:
    options: List[Option] = field(default_factory=list)


@dataclass(frozen=True)
class MalformedOptions:
    reason: str
    raw: Any = None

    @property
    def options(self) -> List[Option]:
        text = str(self.raw) if self.raw else ERROR_OPTION_TEXT
        return [Option(id=ERROR_OPTION_ID, option_text=text, is_correct=False)]


NormalizedOptions = Union[NoOptions, StringOptions, ObjectOptions, MalformedOptions]


def synthetic_option_id(question_id: str, index: int) -> str:
    return f"{question_id}-option-{index}"


def decode_options(
    question_id: str,
    question_type: str,
    raw: Any,
    correct_answer_index: Optional[int] = None
) -> NormalizedOptions:
    """
    Decode a question's raw options field
    
    Args:
        question_id: Owning question, used for synthetic option ids
        question_type: One of the domain question types
        raw: Stringified JSON, or an already decoded list
        correct_answer_index: Correct position for plain string options
        
    Returns:
        One NormalizedOptions variant; never raises
    """
    if question_type == SHORT_ANSWER:
        return NoOptions()

    if isinstance(raw, (list, tuple)):
        items = list(raw)
    else:
        try:
            items = json.loads(raw)
        except (TypeError, ValueError) as e:
            return _malformed(question_id, f"options are not valid JSON: {e}", raw)

    if not isinstance(items, list):
        return _malformed(question_id, "options are not an array", raw)

    if all(isinstance(item, str) for item in items):
        return StringOptions(options=[
            Option(
                id=synthetic_option_id(question_id, idx),
                option_text=text,
                is_correct=(idx == correct_answer_index)
            )
            for idx, text in enumerate(items)
        ])

    if all(isinstance(item, dict) and "option_text" in item for item in items):
        return ObjectOptions(options=[
            Option(
                id=str(item.get("id") or synthetic_option_id(question_id, idx)),
                option_text=item["option_text"],
                is_correct=bool(item.get("is_correct", False))
            )
            for idx, item in enumerate(items)
        ])

    return _malformed(question_id, "unexpected option element shape", raw)


def _malformed(question_id: str, reason: str, raw: Any) -> MalformedOptions:
    logger.warning(f"Malformed options for question {question_id}: {reason} (raw={raw!r})")
    return MalformedOptions(reason=reason, raw=raw)
