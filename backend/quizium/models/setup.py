from pydantic import BaseModel, Field


class Topic(BaseModel):
    hashtag: str = Field(min_length=1)
    name: str = Field(min_length=1)


class TopicList(BaseModel):
    items: list[Topic]


class SpacedRepetitionSettings(BaseModel):
    easy_days: int = Field(default=4, ge=0)
    moderate_days: int = Field(default=2, ge=0)
    challenging_days: int = Field(default=0, ge=0)  # 0 = always due
