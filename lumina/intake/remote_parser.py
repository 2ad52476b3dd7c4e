"""
FILE: lumina/intake/remote_parser.py
PURPOSE: Model-backed task parsing with a guaranteed local fallback
EXPORTS:
  - TaskFieldsResponse, BreakdownResponse (pydantic response schemas)
  - Ok, Err (result variants)
  - RemoteParser
    - parse(raw) -> ParsedTaskData (async, never raises)
    - breakdown(title) -> List[str] (async, never raises)
DEPENDENCIES:
  - asyncio, datetime, logging (stdlib)
  - pydantic (response validation and JSON schema)
  - lumina.intake.inference (InferenceClient)
  - lumina.intake.local_parser (fallback)
NOTES:
  - No client configured: answers straight from the local parser
  - Each inference call is bounded by a timeout
  - Every failure (timeout, process error, bad JSON, schema violation) is
    logged and replaced by the local parser's answer
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Generic, List, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..core.constants import (
    BREAKDOWN_FAILURE_STEPS,
    BREAKDOWN_MAX_STEPS,
    BREAKDOWN_OFFLINE_STEPS,
    DEFAULT_CATEGORY,
)
from ..core.filters import parse_due_date
from ..core.models import ParsedTaskData, Priority
from . import local_parser
from .inference import InferenceClient

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT = 8.0


class TaskFieldsResponse(BaseModel):
    """Shape the model must answer with when parsing a task."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(min_length=1, description="The core task name without time/priority keywords.")
    priority: Priority
    category: str = Field(
        description="The category of the task. Suggest a short, single-word category if implied, otherwise 'Other'."
    )
    due_date: Optional[str] = Field(
        default=None,
        alias="dueDate",
        description="ISO 8601 date string if a time is mentioned, otherwise null.",
    )
    notes: Optional[str] = Field(
        default="",
        description="Any additional context, description, or details mentioned in the input that are not part of the core title.",
    )

    @field_validator("title")
    @classmethod
    def strip_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title is blank")
        return value

    @field_validator("priority", mode="before")
    @classmethod
    def coerce_priority(cls, value):
        return Priority.coerce(value)

    @field_validator("category")
    @classmethod
    def default_category(cls, value: str) -> str:
        return value.strip() or DEFAULT_CATEGORY

    @field_validator("due_date")
    @classmethod
    def check_due_date(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        value = value.strip()
        if parse_due_date(value) is None:
            raise ValueError(f"not an ISO-8601 date: {value!r}")
        return value

    def to_parsed(self) -> ParsedTaskData:
        return ParsedTaskData(
            title=self.title,
            priority=self.priority,
            category=self.category,
            due_date=self.due_date,
            notes=self.notes or "",
        )


class BreakdownResponse(BaseModel):
    steps: List[str] = Field(description="A list of 3 to 5 concrete, actionable sub-steps.")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    reason: str


Result = Union[Ok[T], Err]

TASK_SCHEMA = TaskFieldsResponse.model_json_schema(by_alias=True)
BREAKDOWN_SCHEMA = BreakdownResponse.model_json_schema()


class RemoteParser:
    """
    Parse task text with a language model, falling back to local rules.

    Args:
        client: Inference capability, or None to always parse locally
        timeout: Seconds allowed per inference call
        clock: Returns the current time (injectable for tests)
    """

    def __init__(
        self,
        client: Optional[InferenceClient] = None,
        timeout: float = DEFAULT_TIMEOUT,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.client = client
        self.timeout = timeout
        self.clock = clock

    async def parse(self, raw: str) -> ParsedTaskData:
        if self.client is None:
            return self._parse_locally(raw)

        prompt = (
            "Parse this task input into structured data. "
            f"Current date is {self.clock().isoformat()}. "
            f'Input: "{raw}"'
        )
        result = await self._call(prompt, TaskFieldsResponse, TASK_SCHEMA)
        if isinstance(result, Err):
            logger.warning("Task parsing via model failed (%s); using local parser", result.reason)
            return self._parse_locally(raw)
        return result.value.to_parsed()

    async def breakdown(self, title: str) -> List[str]:
        """
        Split a task into a handful of short actionable steps.

        Returns a fixed generic list when no client is configured, and a
        different fixed list when the call fails.
        """
        if self.client is None:
            return list(BREAKDOWN_OFFLINE_STEPS)

        prompt = f'Break down the task "{title}" into 3-5 simple, actionable sub-tasks. Keep them short.'
        result = await self._call(prompt, BreakdownResponse, BREAKDOWN_SCHEMA)
        if isinstance(result, Ok):
            steps = [s.strip() for s in result.value.steps if s.strip()]
            if steps:
                return steps[:BREAKDOWN_MAX_STEPS]
            result = Err("no steps returned")

        logger.warning("Task breakdown via model failed (%s)", result.reason)
        return list(BREAKDOWN_FAILURE_STEPS)

    def _parse_locally(self, raw: str) -> ParsedTaskData:
        return local_parser.parse(raw, today=self.clock().date())

    async def _call(self, prompt: str, response_model: type, schema: dict) -> Result:
        try:
            text = await asyncio.wait_for(self.client.infer(prompt, schema), timeout=self.timeout)
        except asyncio.TimeoutError:
            return Err(f"timed out after {self.timeout}s")
        except Exception as e:
            # Any client failure is recoverable here
            return Err(f"{type(e).__name__}: {e}")

        if not isinstance(text, str) or not text.strip():
            return Err("empty response")

        try:
            return Ok(response_model.model_validate_json(text))
        except ValidationError as e:
            return Err(f"invalid response ({e.error_count()} error(s))")
        except Exception as e:
            # Validators may raise outside pydantic's error wrapping
            return Err(f"invalid response ({type(e).__name__}: {e})")
