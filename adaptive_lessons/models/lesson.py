import re
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class Skill(str, Enum):
    LISTENING = "listening"
    READING = "reading"
    SPEAKING = "speaking"
    WRITING = "writing"
    GRAMMAR = "grammar"
    VOCABULARY = "vocabulary"


class Level(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


POINTS_PER_QUESTION = {
    Level.BEGINNER: 10,
    Level.INTERMEDIATE: 15,
    Level.ADVANCED: 20,
}


def points_per_question(level: str) -> int:
    """Point value of one question at this level (beginner rate for unknown levels)."""
    try:
        return POINTS_PER_QUESTION[Level(level)]
    except ValueError:
        return POINTS_PER_QUESTION[Level.BEGINNER]


class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "mcq"
    TRUE_FALSE = "true-false"
    FILL_BLANK = "fill-blank"
    OPEN = "open"


class CamelModel(BaseModel):
    """Immutable model that reads and writes camelCase JSON keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


_LETTER_RE = re.compile(r"^[A-Da-d]$")


class GeneratedQuestion(CamelModel):
    id: str
    type: QuestionType
    question: str = Field(min_length=1)
    options: Optional[list[str]] = None
    # index into options (mcq), bool (true-false) or free text
    correct_answer: Union[bool, int, str]
    points: int = Field(ge=0)
    explanation: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _normalize_answer(cls, data: Any) -> Any:
        """Resolve the answer forms models commonly return to the canonical type."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if isinstance(data.get("id"), int):
            data["id"] = str(data["id"])

        key = "correctAnswer" if "correctAnswer" in data else "correct_answer"
        if key not in data:
            return data
        answer = data[key]
        q_type = data.get("type")
        options = data.get("options") if isinstance(data.get("options"), list) else []

        if q_type == QuestionType.MULTIPLE_CHOICE and isinstance(answer, str):
            stripped = answer.strip()
            if stripped in options:
                answer = options.index(stripped)
            elif _LETTER_RE.match(stripped):
                answer = ord(stripped.upper()) - ord("A")
            elif stripped.isdigit():
                answer = int(stripped)
        elif q_type == QuestionType.TRUE_FALSE and not isinstance(answer, bool):
            if isinstance(answer, str) and answer.strip().lower() in ("true", "false"):
                answer = answer.strip().lower() == "true"
            elif isinstance(answer, int) and answer in (0, 1):
                answer = bool(answer)
        elif q_type in (QuestionType.FILL_BLANK, QuestionType.OPEN) and answer is not None:
            if not isinstance(answer, str):
                answer = str(answer)

        data[key] = answer
        return data

    @model_validator(mode="after")
    def _check_answer(self) -> "GeneratedQuestion":
        answer = self.correct_answer
        if self.type is QuestionType.MULTIPLE_CHOICE:
            if not self.options or len(self.options) < 2:
                raise ValueError(f"question {self.id}: multiple-choice needs at least two options")
            if isinstance(answer, bool) or not isinstance(answer, int):
                raise ValueError(f"question {self.id}: answer must be an option index")
            if not 0 <= answer < len(self.options):
                raise ValueError(f"question {self.id}: answer index {answer} out of range")
        elif self.type is QuestionType.TRUE_FALSE and not isinstance(answer, bool):
            raise ValueError(f"question {self.id}: true/false answer must be a boolean")
        return self


class VocabularyWord(CamelModel):
    word: str = Field(min_length=1)
    definition: str
    example: str
    synonyms: list[str] = Field(default_factory=list)
    pronunciation: str


# One body per skill, carrying exactly that skill's extra fields.

class ListeningBody(CamelModel):
    skill: Literal[Skill.LISTENING] = Skill.LISTENING
    audio_text: str = Field(min_length=1)


class ReadingBody(CamelModel):
    skill: Literal[Skill.READING] = Skill.READING
    text: str = Field(min_length=1)


class GrammarBody(CamelModel):
    skill: Literal[Skill.GRAMMAR] = Skill.GRAMMAR
    explanation: str = Field(min_length=1)
    examples: list[str]


class VocabularyBody(CamelModel):
    skill: Literal[Skill.VOCABULARY] = Skill.VOCABULARY
    words: list[VocabularyWord] = Field(min_length=1)


class WritingBody(CamelModel):
    skill: Literal[Skill.WRITING] = Skill.WRITING
    prompt: str = Field(min_length=1)
    instructions: list[str]
    min_words: int = Field(ge=1)
    max_words: int = Field(ge=1)

    @model_validator(mode="after")
    def _check_word_range(self) -> "WritingBody":
        if self.min_words > self.max_words:
            raise ValueError(f"minWords ({self.min_words}) exceeds maxWords ({self.max_words})")
        return self


class SpeakingBody(CamelModel):
    skill: Literal[Skill.SPEAKING] = Skill.SPEAKING
    instructions: str = Field(min_length=1)
    prompts: list[str] = Field(min_length=1)
    # seconds
    expected_duration: int = Field(gt=0)


LessonBody = Annotated[
    Union[ListeningBody, ReadingBody, GrammarBody, VocabularyBody, WritingBody, SpeakingBody],
    Field(discriminator="skill"),
]

BODY_MODELS: dict[Skill, type[CamelModel]] = {
    Skill.LISTENING: ListeningBody,
    Skill.READING: ReadingBody,
    Skill.GRAMMAR: GrammarBody,
    Skill.VOCABULARY: VocabularyBody,
    Skill.WRITING: WritingBody,
    Skill.SPEAKING: SpeakingBody,
}


class LessonPayload(CamelModel):
    """Fields every skill's model response carries."""

    title: str = Field(min_length=1)
    content: Optional[str] = None
    questions: list[GeneratedQuestion]


class GeneratedLesson(CamelModel):
    id: str
    skill: Skill
    level: str
    lesson_number: int
    title: str
    content: Optional[str] = None
    body: LessonBody
    questions: list[GeneratedQuestion]
    points: int
    generated_at: datetime
