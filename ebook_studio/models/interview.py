"""Interview answer model."""

from pydantic import BaseModel


class InterviewResponse(BaseModel):
    """One answered interview question. Sequence order is meaningful."""

    question: str
    answer: str
