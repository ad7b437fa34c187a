"""
CI Summarizer - Prompts
=======================

System and user prompts for the three commands.
"""

from typing import Optional

REVIEW_SYSTEM_PROMPT = """You are an AI assistant that reviews code changes in a commit.
- Summarize key modifications.
- Flag potential security issues or code smells.
- Suggest best practices or improvements where relevant.
- Be concise but thorough in your review."""

LOGS_SYSTEM_PROMPT = """You are an AI assistant specialized in diagnosing CI/CD and application log errors.
- Identify recurring failures or error patterns.
- Suggest potential fixes or pipeline optimizations.
- Provide a concise summary for immediate insight."""

RELEASE_SYSTEM_PROMPT = """You are an AI assistant that organizes commit messages into release notes.
- Categorize them (feat, fix, docs, etc.).
- Provide a concise, Markdown-friendly summary of changes."""


def review_prompt(owner: str, repo: str, sha: str) -> str:
    return (
        f"The commit to analyze is {sha} in the {owner}/{repo} repository.\n"
        'If you need the diff, call the "fetchCommitDiff" tool with:\n'
        f'{{"owner": "{owner}", "repo": "{repo}", "sha": "{sha}"}}.'
    )


def logs_prompt(
    log_file: Optional[str] = None,
    workflow_id: Optional[str] = None,
    job_id: Optional[str] = None
) -> str:
    lines = [
        "We want to analyze recent logs for errors or inefficiencies.",
        'You can call "readLocalLogs" or "fetchSemaphoreLogs" if you need data.',
    ]
    if log_file:
        lines.append(f'The local log file is "{log_file}".')
    if workflow_id and job_id:
        lines.append(
            f'The Semaphore job has workflowId "{workflow_id}" and jobId "{job_id}".'
        )
    lines.append("Provide a summary of issues and recommended optimizations.")
    return "\n".join(lines)


def release_prompt(messages: list[str]) -> str:
    joined = "\n".join(messages)
    return (
        "Here are the commit messages:\n\n"
        f"{joined}\n\n"
        "Please produce comprehensive but concise release notes in Markdown format."
    )
