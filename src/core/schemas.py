"""
Pydantic schemas for data that arrives from outside the job:
the digest definition document and library items from search.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Selector(BaseModel):
    """
    A query/count/reason tuple used to retrieve a bounded set of library items.
    """
    model_config = ConfigDict(frozen=True)

    query: str
    count: int = Field(..., ge=1)
    reason: str = ""


class ZeroShotDefinition(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    user_preferences_profile_prompt: str = Field(..., alias="userPreferencesProfilePrompt")
    rank_prompt: str = Field(..., alias="rankPrompt")


class DigestDefinition(BaseModel):
    """
    Declarative digest configuration fetched at the start of every run.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = ""
    preference_selectors: List[Selector] = Field(default_factory=list, alias="preferenceSelectors")
    candidate_selectors: List[Selector] = Field(default_factory=list, alias="candidateSelectors")
    content_features_prompt: str = Field("", alias="contentFeaturesPrompt")
    content_rating_prompt: str = Field("", alias="contentRatingPrompt")
    summary_prompt: str = Field(..., alias="summaryPrompt")
    assemble_prompt: str = Field("", alias="assemblePrompt")
    zero_shot: ZeroShotDefinition = Field(..., alias="zeroShot")


class LibraryItem(BaseModel):
    """
    A saved article as returned by the search service.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    title: str
    author: Optional[str] = None
    readable_content: str = Field("", alias="readableContent")
    word_count: Optional[int] = Field(None, alias="wordCount")
    read_at: Optional[datetime] = Field(None, alias="readAt")
    saved_at: Optional[datetime] = Field(None, alias="savedAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")
    highlight_count: int = Field(0, alias="highlightCount")

    @field_validator("readable_content", mode="before")
    @classmethod
    def _null_content(cls, value):
        # Searches without content may send null
        return "" if value is None else value

    @field_validator("highlight_count", mode="before")
    @classmethod
    def _null_count(cls, value):
        return 0 if value is None else value


class CreateDigestJobData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId")


class CreateDigestJobResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    job_id: str = Field(..., alias="jobId")
