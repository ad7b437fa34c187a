"""
CI Summarizer - Schemas
=======================

Pydantic models for commit ranges, resolution results, model output
and tool parameters.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CommitRange(BaseModel):
    """A base/head pair of git references, compared with three-dot semantics."""

    base: str = Field(..., description="Older reference (tag or SHA)")
    head: str = Field(..., description="Newer reference (tag or SHA)")

    @property
    def spec(self) -> str:
        return f"{self.base}...{self.head}"


class CommitInfo(BaseModel):
    """A commit as reported by the GitHub API."""

    sha: str = Field(..., description="Commit SHA")
    message: str = Field(default="", description="Full commit message")


class ResolutionMode(str, Enum):
    """How the commits to review are determined."""
    COMPARE = "compare"
    SINGLE = "single"


class ResolutionPlan(BaseModel):
    """
    Network-free decision of how to resolve the commits to review.

    In COMPARE mode ``commit_range`` is set and ``fallback_sha`` is the
    commit used when the comparison yields nothing. In SINGLE mode only
    ``fallback_sha`` is set.
    """

    mode: ResolutionMode
    commit_range: Optional[CommitRange] = None
    fallback_sha: Optional[str] = None


class CompareOutcome(BaseModel):
    """Result of the compare step: commits in order, or why there are none."""

    commits: list[CommitInfo] = Field(default_factory=list)
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return bool(self.commits)

    @property
    def shas(self) -> list[str]:
        return [c.sha for c in self.commits]

    @property
    def messages(self) -> list[str]:
        return [c.message for c in self.commits if c.message]


class ReviewResult(BaseModel):
    """Generated review text keyed by commit SHA, in review order."""

    reviews: dict[str, str] = Field(default_factory=dict)

    def add(self, sha: str, text: str) -> None:
        self.reviews[sha] = text

    @property
    def commits(self) -> list[str]:
        return list(self.reviews)


class GenerationResult(BaseModel):
    """Final answer of one text generation."""

    text: str = Field(..., description="Final generated text")
    steps: int = Field(..., ge=1, description="Model calls made")
    tool_calls: list[str] = Field(
        default_factory=list,
        description="Names of the tools the model called, in order"
    )


# Tool parameters

class CommitDiffParams(BaseModel):
    """Parameters of the commit diff tool."""

    owner: str
    repo: str
    sha: str


class LocalLogParams(BaseModel):
    """Parameters of the local log tool."""

    path: str


class SemaphoreLogParams(BaseModel):
    """Parameters of the Semaphore log tool."""

    model_config = ConfigDict(populate_by_name=True)

    workflow_id: str = Field(..., alias="workflowId")
    job_id: str = Field(..., alias="jobId")
