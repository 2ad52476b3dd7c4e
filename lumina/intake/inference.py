"""
FILE: lumina/intake/inference.py
PURPOSE: Inference boundary - ask a language model for schema-shaped JSON
EXPORTS:
  - InferenceClient (protocol): async infer(prompt, schema) -> str
  - ClaudeCliClient - runs the local Claude CLI as a subprocess
  - extract_json_object(text) -> str
  - get_inference_client(settings) -> ClaudeCliClient | None
DEPENDENCIES:
  - asyncio, json, re, shutil (stdlib)
  - lumina.config (Settings)
  - lumina.core.exceptions (InferenceError)
NOTES:
  - Uses command: claude -p --model <model>, with the prompt on stdin
  - The CLI cannot enforce a schema, so the schema is appended to the
    prompt and the reply is scanned for the first complete JSON object
  - Every failure surfaces as InferenceError (or asyncio.TimeoutError when
    the caller applies a timeout); callers decide how to recover
"""

import asyncio
import json
import logging
import re
import shutil
from typing import Any, Dict, Optional, Protocol

from ..config import Settings
from ..core.exceptions import InferenceError

logger = logging.getLogger(__name__)

SCHEMA_INSTRUCTIONS = """

CRITICAL: You must respond with ONLY a valid JSON object matching this JSON Schema:
{schema}

Do not include any explanations, conversational text, markdown formatting, or code blocks. Output ONLY the raw JSON object."""

CODE_BLOCK = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL)


class InferenceClient(Protocol):
    async def infer(self, prompt: str, schema: Dict[str, Any]) -> str:
        """Return a JSON document answering prompt, shaped by schema."""
        ...


def extract_json_object(text: str) -> str:
    """
    Pull a JSON object out of a model reply.

    Strategies, in order:
        1. The whole reply is a JSON object
        2. A ```json fenced block
        3. The first "{" from which a whole JSON object decodes

    Raises:
        InferenceError: If no JSON object can be found
    """
    text = text.strip()
    if not text:
        raise InferenceError("Empty response")

    candidates = [text]
    fenced = CODE_BLOCK.search(text)
    if fenced:
        candidates.append(fenced.group(1))

    for candidate in candidates:
        try:
            if isinstance(json.loads(candidate), dict):
                return candidate
        except json.JSONDecodeError:
            pass

    # Try decoding at each "{" (handles objects embedded in prose)
    decoder = json.JSONDecoder()
    start = text.find("{")
    while start != -1:
        try:
            value, end = decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            pass
        else:
            if isinstance(value, dict):
                return text[start:end]
        start = text.find("{", start + 1)

    raise InferenceError("No JSON object in response")


class ClaudeCliClient:
    """
    Inference through the locally installed Claude CLI.

    Args:
        executable: Resolved path to the claude binary
        model: Model alias passed via --model
    """

    def __init__(self, executable: str, model: str = "haiku"):
        self.executable = executable
        self.model = model

    async def infer(self, prompt: str, schema: Dict[str, Any]) -> str:
        full_prompt = prompt + SCHEMA_INSTRUCTIONS.format(schema=json.dumps(schema, indent=2))

        try:
            process = await asyncio.create_subprocess_exec(
                self.executable, "-p", "--model", self.model,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise InferenceError(f"Could not start {self.executable}: {e}") from e

        try:
            stdout, stderr = await process.communicate(full_prompt.encode("utf-8"))
        except asyncio.CancelledError:
            # Caller gave up (usually a timeout); don't leave the CLI running
            if process.returncode is None:
                process.kill()
                await process.wait()
            raise

        if process.returncode != 0:
            detail = stderr.decode("utf-8", errors="replace").strip()
            raise InferenceError(f"claude exited with {process.returncode}: {detail[:200]}")

        return extract_json_object(stdout.decode("utf-8", errors="replace"))


def get_inference_client(settings: Settings) -> Optional[ClaudeCliClient]:
    """
    Build the configured inference client.

    Returns:
        None when inference is disabled or the CLI is not on PATH
    """
    if not settings.inference_enabled:
        return None

    executable = shutil.which(settings.claude_command)
    if not executable:
        logger.info("%s not found on PATH; using the local parser", settings.claude_command)
        return None

    return ClaudeCliClient(executable, model=settings.claude_model)
