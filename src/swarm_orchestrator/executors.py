"""
Executors - External collaborators that do the actual agent work.

The orchestrator only depends on the two protocols below:

- AgentExecutor.invoke(profile, subtask, context) -> AgentOutput
- VoteExecutor.cast_vote(profile, question, options, context) -> option

Both may raise; the scheduler turns failures into fallback attempts and the
consensus module turns them into abstentions.

CommandAgentExecutor and CommandVoteExecutor implement the protocols by
piping a prompt into a text-generation command (default: ``claude --print``)
running as an asyncio subprocess.
"""

import asyncio
import logging
import shlex
import time
from dataclasses import dataclass
from typing import Optional, Protocol

from .errors import AgentInvocationError
from .models import AgentProfile, ConversationHistory, Subtask

logger = logging.getLogger(__name__)

MAX_CONTEXT_MESSAGES = 20


@dataclass
class AgentOutput:
	"""What an agent produced for a subtask."""
	output: str
	duration_ms: int = 0


class AgentExecutor(Protocol):
	async def invoke(
		self,
		profile: AgentProfile,
		subtask: Subtask,
		context: ConversationHistory,
	) -> AgentOutput:
		...


class VoteExecutor(Protocol):
	async def cast_vote(
		self,
		profile: AgentProfile,
		question: str,
		options: list[str],
		context: ConversationHistory,
	) -> str:
		...


def render_context(context: ConversationHistory, limit: int = MAX_CONTEXT_MESSAGES) -> str:
	"""Render the most recent messages as plain text for a prompt."""
	lines = []
	for message in context[-limit:]:
		speaker = message.name or message.role
		lines.append(f"[{speaker}]: {message.content}")
	return "\n".join(lines)


def build_subtask_prompt(profile: AgentProfile, subtask: Subtask, context: ConversationHistory) -> str:
	"""Assemble the prompt sent to an agent for one subtask."""
	parts = [profile.system_prompt.strip()] if profile.system_prompt else []

	rendered = render_context(context)
	if rendered:
		parts.extend(["", "## Conversation so far", rendered])

	parts.extend(["", "## Task", subtask.description])
	return "\n".join(parts)


def build_vote_prompt(
	profile: AgentProfile,
	question: str,
	options: list[str],
	context: ConversationHistory,
) -> str:
	"""Assemble the prompt asking an agent to pick exactly one option."""
	parts = [profile.system_prompt.strip()] if profile.system_prompt else []

	rendered = render_context(context)
	if rendered:
		parts.extend(["", "## Conversation so far", rendered])

	parts.extend(["", "## Decision", question, "", "Options:"])
	parts.extend(f"- {option}" for option in options)
	parts.extend(["", "Reply with exactly one option, copied verbatim, and nothing else."])
	return "\n".join(parts)


def match_option(reply: str, options: list[str]) -> Optional[str]:
	"""
	Map a free-text reply onto one of the options.

	An exact (case-insensitive) match wins; otherwise the option mentioned
	earliest in the reply is chosen. Returns None if no option is mentioned.
	"""
	cleaned = reply.strip().strip("`*\"'.").strip()
	for option in options:
		if cleaned.lower() == option.lower():
			return option

	lowered = reply.lower()
	positions = [
		(lowered.find(option.lower()), index)
		for index, option in enumerate(options)
		if option and option.lower() in lowered
	]
	if not positions:
		return None
	_, index = min(positions)
	return options[index]


class CommandRunner:
	"""Runs a text-generation command with a prompt on stdin."""

	def __init__(self, command: str = "claude --print", timeout: Optional[float] = None):
		"""
		Initialize the runner.

		Args:
			command: Command line; the prompt is written to its stdin
			timeout: Seconds to wait for the command, None for no limit
		"""
		self.command = shlex.split(command)
		self.timeout = timeout

	async def run(self, agent_id: str, prompt: str) -> str:
		"""Run the command and return stdout, raising AgentInvocationError on failure."""
		try:
			proc = await asyncio.create_subprocess_exec(
				*self.command,
				stdin=asyncio.subprocess.PIPE,
				stdout=asyncio.subprocess.PIPE,
				stderr=asyncio.subprocess.PIPE,
			)
		except FileNotFoundError as e:
			raise AgentInvocationError(agent_id, f"Command not found: {self.command[0]}") from e

		try:
			stdout, stderr = await asyncio.wait_for(
				proc.communicate(prompt.encode("utf-8")),
				timeout=self.timeout,
			)
		except asyncio.TimeoutError as e:
			proc.kill()
			await proc.wait()
			raise AgentInvocationError(agent_id, f"Command timed out after {self.timeout}s") from e

		if proc.returncode != 0:
			detail = stderr.decode("utf-8", errors="replace").strip()[-500:]
			raise AgentInvocationError(agent_id, f"Command exited with {proc.returncode}: {detail}")

		return stdout.decode("utf-8", errors="replace").strip()


class CommandAgentExecutor:
	"""AgentExecutor backed by a text-generation command."""

	def __init__(self, command: str = "claude --print", timeout: Optional[float] = None):
		self.runner = CommandRunner(command, timeout)

	async def invoke(
		self,
		profile: AgentProfile,
		subtask: Subtask,
		context: ConversationHistory,
	) -> AgentOutput:
		start = time.monotonic()
		prompt = build_subtask_prompt(profile, subtask, context)
		logger.debug(f"Invoking {profile.id} for {subtask.id} ({len(prompt)} chars)")

		output = await self.runner.run(profile.id, prompt)
		if not output:
			raise AgentInvocationError(profile.id, "Empty response")

		return AgentOutput(
			output=output,
			duration_ms=int((time.monotonic() - start) * 1000),
		)


class CommandVoteExecutor:
	"""VoteExecutor that asks each agent, via a command, to pick an option."""

	def __init__(self, command: str = "claude --print", timeout: Optional[float] = None):
		self.runner = CommandRunner(command, timeout)

	async def cast_vote(
		self,
		profile: AgentProfile,
		question: str,
		options: list[str],
		context: ConversationHistory,
	) -> str:
		prompt = build_vote_prompt(profile, question, options, context)
		reply = await self.runner.run(profile.id, prompt)

		choice = match_option(reply, options)
		if choice is None:
			raise AgentInvocationError(profile.id, f"Reply names no option: {reply[:80]!r}")
		return choice
