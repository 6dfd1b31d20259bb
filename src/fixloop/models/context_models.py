"""Models for gathered repository context and the analysis cache."""

from datetime import datetime

from pydantic import BaseModel, Field


class RepoContext(BaseModel):
    """The three text blobs gathered before analysis."""

    test_output: str = ""
    repo_structure: str = ""
    git_diff: str = ""


class CachedAnalysis(BaseModel):
    """Repository context plus the analysis response, persisted between runs."""

    test_command: str
    analysis: str
    context: RepoContext
    created_at: datetime = Field(default_factory=datetime.now)
