"""
CI Summarizer - Model Tools
===========================

Fetchers exposed to the model as callable tools. A tool pairs a name
and description with a pydantic parameter model (sent to the model as
JSON schema) and an async handler returning text.
"""

import asyncio
import json
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Type

from pydantic import BaseModel, ValidationError

from ci_summarizer.core.ci_logs import LocalLogReader, SemaphoreLogFetcher
from ci_summarizer.core.github_client import GitHubClient
from ci_summarizer.exceptions import GenerationError
from ci_summarizer.schemas import CommitDiffParams, LocalLogParams, SemaphoreLogParams
from ci_summarizer.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class Tool:
    """
    A function the model may call.

    Attributes:
        name: Name the model uses to call the tool
        description: What the tool does, shown to the model
        params_model: Pydantic model validating the call arguments
        handler: Async function receiving the validated arguments
    """
    name: str
    description: str
    params_model: Type[BaseModel]
    handler: Callable[[Any], Awaitable[str]]

    def to_openai(self) -> dict:
        """Render the tool in chat-completions ``tools`` format."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.params_model.model_json_schema(),
            },
        }

    async def invoke(self, arguments: str) -> str:
        """
        Validate the model's JSON arguments and run the handler.

        Raises:
            GenerationError: if the arguments are not valid JSON or do not
                match the parameter model
        """
        try:
            raw = json.loads(arguments or "{}")
            params = self.params_model.model_validate(raw)
        except (json.JSONDecodeError, ValidationError) as e:
            raise GenerationError(f"Invalid arguments for tool {self.name}: {e}") from e

        logger.info(f"Calling tool {self.name}", extra={"tool": self.name})
        result = await self.handler(params)
        return result if isinstance(result, str) else json.dumps(result)


def commit_diff_tool(github: GitHubClient) -> Tool:
    async def handler(params: CommitDiffParams) -> str:
        return await github.fetch_commit_diff(params.sha, owner=params.owner, repo=params.repo)

    return Tool(
        name="fetchCommitDiff",
        description="A tool to retrieve the diff for a GitHub commit.",
        params_model=CommitDiffParams,
        handler=handler,
    )


def local_logs_tool(reader: LocalLogReader) -> Tool:
    async def handler(params: LocalLogParams) -> str:
        return await asyncio.to_thread(reader.read, params.path)

    return Tool(
        name="readLocalLogs",
        description="Read logs from a local file on disk",
        params_model=LocalLogParams,
        handler=handler,
    )


def semaphore_logs_tool(fetcher: SemaphoreLogFetcher) -> Tool:
    async def handler(params: SemaphoreLogParams) -> str:
        return await fetcher.fetch_job_logs(params.workflow_id, params.job_id)

    return Tool(
        name="fetchSemaphoreLogs",
        description="Fetch logs from Semaphore for a specific job or pipeline",
        params_model=SemaphoreLogParams,
        handler=handler,
    )
