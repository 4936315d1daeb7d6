"""Exception hierarchy for swarm-orchestrator."""


class SwarmOrchestratorError(Exception):
	"""Base exception for orchestration errors."""
	pass


class CatalogError(SwarmOrchestratorError):
	"""Raised when the agent catalog cannot be loaded or is inconsistent."""
	pass


class AgentInvocationError(SwarmOrchestratorError):
	"""Raised by an agent or vote executor when a call fails."""

	def __init__(self, agent_id: str, message: str):
		super().__init__(f"{agent_id}: {message}")
		self.agent_id = agent_id


class CyclicDependencyError(SwarmOrchestratorError):
	"""Raised when subtask dependencies contain a cycle."""

	def __init__(self, subtask_ids: list[str]):
		super().__init__(f"Dependency cycle among subtasks: {', '.join(subtask_ids)}")
		self.subtask_ids = subtask_ids


class ConsensusError(SwarmOrchestratorError):
	"""Raised when a consensus vote yields no valid votes."""
	pass
