from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import List


class CompletionResponse(BaseModel):
    """Serialized as {totalDays, completedDays, percent}."""
    total_days: int
    completed_days: int
    percent: int

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class UserStatsResponse(BaseModel):
    name: str
    streak: int
    completion7: CompletionResponse
    completion30: CompletionResponse
    completion90: CompletionResponse

    model_config = ConfigDict(from_attributes=True)


class StatsResponse(BaseModel):
    generated_at: str
    data: List[UserStatsResponse]
