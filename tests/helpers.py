"""Shared test fixtures and helpers for swarm-orchestrator tests."""

import asyncio
from pathlib import Path
from typing import Optional

from swarm_orchestrator.catalog import AgentCatalog
from swarm_orchestrator.config import Config
from swarm_orchestrator.errors import AgentInvocationError
from swarm_orchestrator.executors import AgentOutput
from swarm_orchestrator.models import AgentProfile, Subtask, SubtaskResult


def make_config(tmp_path: Path, **overrides) -> Config:
	"""Config pointing at a temp dir so tests never touch the user's dirs."""
	config = Config(config_dir=tmp_path / "config", data_dir=tmp_path / "data")
	for key, val in overrides.items():
		setattr(config, key, val)
	return config


def make_agent(agent_id: str, capabilities: list[str], priority: int = 3) -> AgentProfile:
	return AgentProfile(
		id=agent_id,
		display_name=agent_id.replace("-", " ").title(),
		capabilities=frozenset(capabilities),
		priority=priority,
	)


def make_catalog(*agents: AgentProfile) -> AgentCatalog:
	"""Small catalog; a priority-1 generalist is appended when missing."""
	agents = list(agents)
	if not any(a.id == "general" for a in agents):
		agents.append(make_agent("general", ["chat", "general"], priority=1))
	return AgentCatalog(agents, generalist_id="general", version="test")


def make_subtask(
	subtask_id: str = "sub-1",
	capabilities: Optional[list[str]] = None,
	dependencies: Optional[list[str]] = None,
	complexity: int = 5,
	priority: int = 3,
) -> Subtask:
	return Subtask(
		id=subtask_id,
		description=f"Work on {subtask_id}",
		dependencies=set(dependencies or []),
		required_capabilities=set(capabilities or []),
		priority=priority,
		estimated_complexity=complexity,
	)


def make_result(
	agent_id: str,
	output: str,
	subtask_id: str = "sub-1",
	success: bool = True,
) -> SubtaskResult:
	return SubtaskResult(
		subtask_id=subtask_id,
		agent_id=agent_id,
		output=output,
		success=success,
		confidence=0.9 if success else 0.0,
		duration_ms=100,
	)


class EchoExecutor:
	"""AgentExecutor that reports what it was asked to do."""

	def __init__(self, fail_for: Optional[set[str]] = None, delay: float = 0.0):
		self.fail_for = fail_for or set()
		self.delay = delay
		self.calls: list[tuple[str, str]] = []
		self.contexts: dict[str, list] = {}
		self.active = 0
		self.max_active = 0

	async def invoke(self, profile, subtask, context):
		self.calls.append((profile.id, subtask.id))
		self.contexts[subtask.id] = list(context)
		self.active += 1
		self.max_active = max(self.max_active, self.active)
		try:
			if self.delay:
				await asyncio.sleep(self.delay)
			if profile.id in self.fail_for:
				raise AgentInvocationError(profile.id, "simulated failure")
			return AgentOutput(output=f"[{profile.display_name}] Completed: {subtask.description}", duration_ms=1)
		finally:
			self.active -= 1


class ScriptedVoteExecutor:
	"""VoteExecutor that returns a preset choice per agent."""

	def __init__(self, choices: dict[str, str], default: Optional[str] = None):
		self.choices = choices
		self.default = default

	async def cast_vote(self, profile, question, options, context):
		choice = self.choices.get(profile.id, self.default)
		if choice is None:
			raise AgentInvocationError(profile.id, "no opinion")
		return choice
