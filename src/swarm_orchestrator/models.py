"""
Orchestration Models - Pydantic schemas for one orchestration run.

Everything here except AgentProfile is created at the start of one
``execute()`` call and discarded once the OrchestrationResult is returned.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ChatMessage(BaseModel):
	"""A single message of prior dialogue."""
	model_config = ConfigDict(frozen=True)

	role: str = Field(description="user, assistant or system")
	content: str = Field(default="")
	name: Optional[str] = Field(default=None, description="Agent id for assistant messages")


ConversationHistory = list[ChatMessage]


class Task(BaseModel):
	"""A natural-language task submitted to the orchestrator."""
	description: str
	conversation_context: ConversationHistory = Field(default_factory=list)


class SubtaskStatus(str, Enum):
	"""Execution state of a subtask within a run."""
	PENDING = "pending"
	COMPLETED = "completed"


class Subtask(BaseModel):
	"""An atomic unit of work produced by decomposition."""
	id: str = Field(description="Unique within one run")
	description: str
	dependencies: set[str] = Field(default_factory=set, description="Subtask IDs that must complete first")
	required_capabilities: set[str] = Field(default_factory=set)
	priority: int = Field(default=3, ge=1, le=5)
	estimated_complexity: int = Field(default=5, ge=1, le=10)
	category: str = Field(default="general")


class AgentProfile(BaseModel):
	"""A named capability profile from the agent catalog. Immutable."""
	model_config = ConfigDict(frozen=True)

	id: str
	display_name: str
	capabilities: frozenset[str] = Field(default_factory=frozenset)
	priority: int = Field(default=1, description="Higher = more specialized")
	description: str = Field(default="")
	system_prompt: str = Field(default="")


class AgentAssignment(BaseModel):
	"""Routing decision for one subtask."""
	subtask: Subtask
	primary_agent_id: str
	fallback_agent_ids: list[str] = Field(default_factory=list)
	routing_confidence: float = Field(ge=0.0, le=1.0)

	@model_validator(mode="after")
	def _check_fallbacks(self) -> "AgentAssignment":
		if self.primary_agent_id in self.fallback_agent_ids:
			raise ValueError("primary agent must not appear among fallbacks")
		if len(set(self.fallback_agent_ids)) != len(self.fallback_agent_ids):
			raise ValueError("fallback agents must be unique")
		return self

	@property
	def subtask_id(self) -> str:
		return self.subtask.id

	@property
	def agent_chain(self) -> list[str]:
		"""Primary followed by fallbacks, in the order they are tried."""
		return [self.primary_agent_id, *self.fallback_agent_ids]


class SubtaskResult(BaseModel):
	"""Outcome of executing one subtask. Exactly one per subtask per completed run."""
	subtask_id: str
	agent_id: str
	output: str = Field(default="")
	success: bool
	confidence: float = Field(ge=0.0, le=1.0)
	duration_ms: int = Field(ge=0)
	error: Optional[str] = Field(default=None)
	fallback_hops: int = Field(default=0, ge=0, description="Fallback agents used before success")


class VerificationResult(BaseModel):
	"""Cross-check outcome for one extracted claim."""
	claim: str
	verified: bool
	confidence: float = Field(ge=0.0, le=1.0)
	verified_by: set[str] = Field(default_factory=set)
	contradicted_by: set[str] = Field(default_factory=set)
	reasoning: str = Field(default="")


class ConsensusRequest(BaseModel):
	"""A multi-option decision the caller wants the agents to settle."""
	question: str
	options: list[str] = Field(min_length=1)
	agent_ids: Optional[list[str]] = Field(
		default=None,
		description="Agents to poll; None polls the agents involved in the run",
	)


class ConsensusDecision(BaseModel):
	"""Result of a consensus vote."""
	question: str
	options: list[str] = Field(min_length=1)
	votes: dict[str, str] = Field(default_factory=dict, description="agent id -> chosen option")
	winner: str
	confidence: float = Field(gt=0.0, le=1.0)
	unanimous: bool

	@model_validator(mode="after")
	def _check_winner(self) -> "ConsensusDecision":
		if self.winner not in self.options:
			raise ValueError(f"winner {self.winner!r} is not one of the options")
		return self


class OrchestrationResult(BaseModel):
	"""Terminal artifact of one orchestration run."""
	task_id: str
	subtask_results: list[SubtaskResult] = Field(default_factory=list)
	verifications: list[VerificationResult] = Field(default_factory=list)
	consensus_decisions: list[ConsensusDecision] = Field(default_factory=list)
	final_answer: str = Field(default="")
	total_duration_ms: int = Field(default=0, ge=0)
	agents_involved: set[str] = Field(default_factory=set)

	# Explicit partial-completion reporting
	completed: bool = Field(default=True)
	unresolved_subtask_ids: list[str] = Field(default_factory=list)
	cancelled: bool = Field(default=False)

	@property
	def success_rate(self) -> float:
		"""Fraction of subtask results that succeeded."""
		if not self.subtask_results:
			return 0.0
		return sum(1 for r in self.subtask_results if r.success) / len(self.subtask_results)
