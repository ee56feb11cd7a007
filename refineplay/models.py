"""Pydantic models for refinement playback."""

from pydantic import BaseModel, ConfigDict, Field

METRIC_NAMES = ("clarity", "correctness", "structure")


class Scores(BaseModel):
    model_config = ConfigDict(frozen=True)

    clarity: int = Field(ge=0, le=100)
    correctness: int = Field(ge=0, le=100)
    structure: int = Field(ge=0, le=100)


class Pass(BaseModel):
    """One pre-authored snapshot in a problem's refinement sequence."""
    model_config = ConfigDict(frozen=True)

    output: str
    critique: str = ""
    scores: Scores
    errors: int = Field(default=0, ge=0)

    @property
    def clarity(self) -> int:
        return self.scores.clarity

    @property
    def correctness(self) -> int:
        return self.scores.correctness

    @property
    def structure(self) -> int:
        return self.scores.structure


class Problem(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    title: str
    description: str = ""
    passes: tuple[Pass, ...] = Field(min_length=1)

    @property
    def pass_count(self) -> int:
        return len(self.passes)


# --- Derived display models ---


class FormattedMetrics(BaseModel):
    """Scores of a single pass plus their rounded average."""
    clarity: int
    correctness: int
    structure: int
    errors: int
    average: int


class MetricSeries(BaseModel):
    """Per-metric values in visiting order, one entry per shown pass."""
    clarity: list[int] = Field(default_factory=list)
    correctness: list[int] = Field(default_factory=list)
    structure: list[int] = Field(default_factory=list)


class MetricHistory(MetricSeries):
    """Series for a problem's first N passes, including error counts."""
    errors: list[int] = Field(default_factory=list)
