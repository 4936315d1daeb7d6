"""
Engine - Entry point of one orchestration run.

execute() walks a task through the whole pipeline:

	decompose -> route -> schedule (agents + fallbacks) -> verify
	-> consensus (optional) -> synthesize

Agent, routing and consensus failures are turned into data on the
OrchestrationResult; execute() only raises if the decomposer itself does.
"""

import asyncio
import logging
import time
import uuid
from typing import Optional

from ..catalog import AgentCatalog, load_catalog
from ..config import Config, get_config
from ..errors import ConsensusError, CyclicDependencyError
from ..events import EventChannel, StatusChanged, TaskCompleted, TaskStarted
from ..executors import (
	AgentExecutor,
	CommandAgentExecutor,
	CommandVoteExecutor,
	VoteExecutor,
)
from ..models import (
	ConsensusDecision,
	ConsensusRequest,
	ConversationHistory,
	OrchestrationResult,
	Task,
)
from .consensus import ConsensusModule
from .decomposer import Decomposer, KeywordDecomposer, ensure_acyclic
from .router import CapabilityRouter
from .scheduler import DependencyScheduler
from .synthesizer import Synthesizer
from .verifier import ClaimVerifier

logger = logging.getLogger(__name__)


class SwarmOrchestrator:
	"""
	Routes a task to specialist agents and merges their work.

	Holds no per-run state, so independent execute() calls may run
	concurrently. They share only the read-only catalog and the event
	channel.
	"""

	def __init__(
		self,
		agent_executor: AgentExecutor,
		vote_executor: Optional[VoteExecutor] = None,
		catalog: Optional[AgentCatalog] = None,
		events: Optional[EventChannel] = None,
		decomposer: Optional[Decomposer] = None,
		config: Optional[Config] = None,
	):
		"""
		Initialize the orchestrator.

		Args:
			agent_executor: Performs subtask work for an agent
			vote_executor: Casts consensus votes; required only for consensus requests
			catalog: Agent profiles; loaded from config if None
			events: Channel lifecycle events are published to
			decomposer: Task decomposition policy; KeywordDecomposer if None
			config: Settings; the global config if None
		"""
		self.config = config or get_config()
		self.catalog = catalog or load_catalog(
			self.config.catalog_path,
			generalist_id=self.config.generalist_agent_id,
		)
		self.events = events or EventChannel()
		self.decomposer = decomposer or KeywordDecomposer()

		self.router = CapabilityRouter(
			min_score=self.config.min_route_score,
			max_fallbacks=self.config.max_fallbacks,
		)
		self.scheduler = DependencyScheduler(
			agent_executor,
			self.catalog,
			events=self.events,
			max_concurrency=self.config.max_concurrency,
			fallback_decay=self.config.fallback_decay,
			agent_timeout=self.config.agent_timeout_seconds,
		)
		self.verifier = ClaimVerifier(threshold=self.config.verification_threshold)
		self.consensus = (
			ConsensusModule(vote_executor, max_concurrency=self.config.max_concurrency)
			if vote_executor is not None
			else None
		)
		self.synthesizer = Synthesizer()

	@classmethod
	def from_config(cls, config: Optional[Config] = None, events: Optional[EventChannel] = None) -> "SwarmOrchestrator":
		"""Build an orchestrator whose agents and voters run ``config.agent_command``."""
		config = config or get_config()
		return cls(
			CommandAgentExecutor(config.agent_command, timeout=config.agent_timeout_seconds),
			vote_executor=CommandVoteExecutor(config.agent_command, timeout=config.agent_timeout_seconds),
			events=events,
			config=config,
		)

	async def execute(
		self,
		task_description: str,
		context: Optional[ConversationHistory] = None,
		*,
		consensus: Optional[list[ConsensusRequest]] = None,
		cancel_event: Optional[asyncio.Event] = None,
	) -> OrchestrationResult:
		"""
		Run one task end to end.

		Args:
			task_description: Natural-language task (may be empty)
			context: Prior dialogue, passed read-only to every agent
			consensus: Decisions to settle by agent vote after verification
			cancel_event: Set to stop dispatching further subtask batches

		Returns:
			OrchestrationResult
		"""
		task = Task(description=task_description, conversation_context=list(context or []))
		context = task.conversation_context
		task_id = f"moa-{uuid.uuid4().hex[:12]}"
		start = time.monotonic()

		self.events.publish(TaskStarted(task_id=task_id, description=task.description))
		logger.info(f"[{task_id}] Started: {task.description[:80]!r}")

		# Step 1: decompose
		self._set_status(task_id, "planning")
		subtasks = self.decomposer.decompose(task.description, context)
		try:
			ensure_acyclic(subtasks)
		except CyclicDependencyError as e:
			# The scheduler stops at the cycle and reports it as unresolved
			logger.error(f"[{task_id}] Decomposer produced a cycle: {e}")

		# Step 2: route
		assignments = self.router.route(subtasks, self.catalog)

		# Step 3: execute in dependency order
		self._set_status(task_id, "executing")
		report = await self.scheduler.run(assignments, context, task_id=task_id, cancel_event=cancel_event)
		agents_involved = {r.agent_id for r in report.results}

		# Step 4: cross-verify
		self._set_status(task_id, "verifying")
		verifications = await self.verifier.verify_all(report.results)

		# Step 5: consensus on requested decisions
		decisions = await self._run_consensus(task_id, consensus or [], agents_involved, context)

		# Step 6: synthesize
		self._set_status(task_id, "synthesizing")
		final_answer = self.synthesizer.synthesize(report.results, verifications, decisions)

		total_duration_ms = int((time.monotonic() - start) * 1000)
		self.events.publish(TaskCompleted(
			task_id=task_id,
			duration_ms=total_duration_ms,
			agents_used=len(agents_involved),
		))
		logger.info(
			f"[{task_id}] Completed in {total_duration_ms}ms: "
			f"{report.succeeded} succeeded, {report.failed} failed, "
			f"{len(report.unresolved_subtask_ids)} unresolved"
		)

		return OrchestrationResult(
			task_id=task_id,
			subtask_results=report.results,
			verifications=verifications,
			consensus_decisions=decisions,
			final_answer=final_answer,
			total_duration_ms=total_duration_ms,
			agents_involved=agents_involved,
			completed=report.completed,
			unresolved_subtask_ids=report.unresolved_subtask_ids,
			cancelled=report.cancelled,
		)

	async def _run_consensus(
		self,
		task_id: str,
		requests: list[ConsensusRequest],
		agents_involved: set[str],
		context: ConversationHistory,
	) -> list[ConsensusDecision]:
		"""Settle each requested decision; failures are logged and skipped."""
		if not requests:
			return []
		if self.consensus is None:
			logger.warning(f"[{task_id}] {len(requests)} consensus request(s) ignored: no vote executor")
			return []

		decisions = []
		for request in requests:
			agent_ids = request.agent_ids or sorted(agents_involved) or [self.catalog.generalist_id]
			agents = [a for a in (self.catalog.get(aid) for aid in agent_ids) if a is not None]
			if not agents:
				logger.warning(f"[{task_id}] No known agents to vote on {request.question!r}")
				continue
			try:
				decisions.append(await self.consensus.conduct_consensus_vote(
					request.question, request.options, agents, context,
				))
			except ConsensusError as e:
				logger.warning(f"[{task_id}] {e}")
		return decisions

	def _set_status(self, task_id: str, status: str) -> None:
		self.events.publish(StatusChanged(task_id=task_id, status=status))
