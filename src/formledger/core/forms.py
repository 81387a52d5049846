from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Question:
    """A single prompt within a form.

    Notes:
    - `index` is the 0-based position in the form's question sequence and never changes.
    - `required` is informational metadata; submissions never check it.
    - `response_type` is a wire tag (see `ResponseType`); unknown tags are allowed.
    """

    index: int
    title: str
    description: str
    required: bool
    response_type: int
    created_at: float

    @property
    def id(self) -> int:
        return self.index


@dataclass(frozen=True)
class ResponseEntry:
    value: int | str | bytes
    payload: bytes
    timestamp: float
    responder: str


@dataclass(frozen=True)
class ResponseHistory:
    """Parallel, index-aligned view over a question's submissions."""

    responses: tuple[int | str | bytes, ...]
    timestamps: tuple[float, ...]

    @classmethod
    def from_entries(cls, entries: list[ResponseEntry] | tuple[ResponseEntry, ...]) -> "ResponseHistory":
        return cls(
            responses=tuple(e.value for e in entries),
            timestamps=tuple(e.timestamp for e in entries),
        )

    def __len__(self) -> int:
        return len(self.responses)


@dataclass(frozen=True)
class FormDetails:
    id: int
    title: str
    description: str
    created_at: float
    questions: tuple[Question, ...]

    @property
    def questions_count(self) -> int:
        return len(self.questions)


@dataclass
class FormRecord:
    """Mutable per-form state owned by the registry.

    `histories[i]` holds the submissions for `questions[i]`; both lists only grow.
    `responders` is a dict used as an insertion-ordered set.
    """

    id: int
    title: str
    description: str
    created_at: float
    questions: list[Question] = field(default_factory=list)
    responders: dict[str, None] = field(default_factory=dict)
    histories: list[list[ResponseEntry]] = field(default_factory=list)

    @property
    def questions_count(self) -> int:
        return len(self.questions)

    def has_question(self, index: int) -> bool:
        return 0 <= index < len(self.questions)

    def snapshot(self) -> FormDetails:
        return FormDetails(
            id=self.id,
            title=self.title,
            description=self.description,
            created_at=self.created_at,
            questions=tuple(self.questions),
        )
