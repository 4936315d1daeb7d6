"""
Scheduler - Dependency-ordered, batched execution of agent assignments.

Runs assignments in topological batches (Kahn-style):

1. ready = not completed and every dependency completed
2. nothing ready but work remains -> stop, report the rest as unresolved
3. dispatch the whole ready batch concurrently, wait for all of it (fan-out/fan-in)
4. mark every dispatched assignment completed, success or not
5. repeat

Each assignment walks its fallback chain until an agent succeeds. A failed
subtask never blocks its dependents. Concurrent agent calls are bounded by
an asyncio.Semaphore; a cancel event is honoured at every batch boundary.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Optional

from ..catalog import AgentCatalog
from ..events import AgentSelected, EventChannel
from ..executors import AgentExecutor
from ..models import (
	AgentAssignment,
	ChatMessage,
	ConversationHistory,
	SubtaskResult,
	SubtaskStatus,
)

logger = logging.getLogger(__name__)


@dataclass
class ExecutionReport:
	"""Outcome of executing one run's assignments."""
	results: list[SubtaskResult] = field(default_factory=list)
	completed: bool = True
	unresolved_subtask_ids: list[str] = field(default_factory=list)
	cancelled: bool = False

	@property
	def succeeded(self) -> int:
		return sum(1 for r in self.results if r.success)

	@property
	def failed(self) -> int:
		return len(self.results) - self.succeeded


class DependencyScheduler:
	"""
	Executes assignments in dependency order with per-assignment fallback.

	One scheduler may serve concurrent runs; all per-run state lives in
	``run()``.
	"""

	def __init__(
		self,
		executor: AgentExecutor,
		catalog: AgentCatalog,
		events: Optional[EventChannel] = None,
		max_concurrency: int = 5,
		fallback_decay: float = 0.8,
		agent_timeout: Optional[float] = None,
	):
		"""
		Initialize the scheduler.

		Args:
			executor: Performs the actual agent calls
			catalog: Resolves agent ids to profiles
			events: Channel for agent-selected events
			max_concurrency: Maximum agent calls in flight per run
			fallback_decay: Confidence multiplier per fallback hop
			agent_timeout: Seconds per agent call, None for no limit
		"""
		self.executor = executor
		self.catalog = catalog
		self.events = events
		self.max_concurrency = max_concurrency
		self.fallback_decay = fallback_decay
		self.agent_timeout = agent_timeout

	async def run(
		self,
		assignments: list[AgentAssignment],
		context: ConversationHistory,
		task_id: str = "",
		cancel_event: Optional[asyncio.Event] = None,
	) -> ExecutionReport:
		"""
		Execute all assignments.

		Args:
			assignments: One per subtask
			context: Conversation history handed to every agent
			task_id: Run id stamped on emitted events
			cancel_event: When set, no further batch is dispatched

		Returns:
			ExecutionReport with results in batch-completion order
		"""
		report = ExecutionReport()
		if not assignments:
			return report

		status = {a.subtask_id: SubtaskStatus.PENDING for a in assignments}
		by_subtask: dict[str, SubtaskResult] = {}
		semaphore = asyncio.Semaphore(self.max_concurrency)
		batch_number = 0

		async def process(assignment: AgentAssignment) -> None:
			result = await self._execute_assignment(
				assignment,
				self._context_for(assignment, context, by_subtask),
				semaphore,
				task_id,
			)
			report.results.append(result)
			by_subtask[result.subtask_id] = result
			status[assignment.subtask_id] = SubtaskStatus.COMPLETED

		while True:
			pending = [a for a in assignments if status[a.subtask_id] != SubtaskStatus.COMPLETED]
			if not pending:
				break

			if cancel_event is not None and cancel_event.is_set():
				logger.info(f"[{task_id}] Cancelled before batch {batch_number + 1}")
				report.cancelled = True
				break

			ready = [
				a for a in pending
				if all(status.get(d) == SubtaskStatus.COMPLETED for d in a.subtask.dependencies)
			]
			if not ready:
				logger.warning(
					f"[{task_id}] No runnable subtasks but {len(pending)} remain; "
					f"stopping with partial completion"
				)
				break

			batch_number += 1
			logger.info(f"[{task_id}] Batch {batch_number}: {[a.subtask_id for a in ready]}")

			# Fan out
			tasks = [asyncio.create_task(process(a)) for a in ready]
			# Fan in
			await asyncio.gather(*tasks)

		report.unresolved_subtask_ids = [
			a.subtask_id for a in assignments
			if status[a.subtask_id] != SubtaskStatus.COMPLETED
		]
		report.completed = not report.unresolved_subtask_ids
		return report

	def _context_for(
		self,
		assignment: AgentAssignment,
		context: ConversationHistory,
		by_subtask: dict[str, SubtaskResult],
	) -> ConversationHistory:
		"""Conversation history plus the successful outputs of this subtask's dependencies."""
		extra = [
			ChatMessage(role="assistant", name=by_subtask[dep].agent_id, content=by_subtask[dep].output)
			for dep in sorted(assignment.subtask.dependencies)
			if dep in by_subtask and by_subtask[dep].success
		]
		return [*context, *extra] if extra else list(context)

	async def _execute_assignment(
		self,
		assignment: AgentAssignment,
		context: ConversationHistory,
		semaphore: asyncio.Semaphore,
		task_id: str,
	) -> SubtaskResult:
		"""Try the primary agent, then each fallback in order."""
		start = time.monotonic()
		subtask = assignment.subtask

		if self.events is not None:
			self.events.publish(AgentSelected(
				task_id=task_id,
				agent_id=assignment.primary_agent_id,
				subtask_id=subtask.id,
			))

		last_error = "No agent available"
		for hop, agent_id in enumerate(assignment.agent_chain):
			profile = self.catalog.get(agent_id)
			if profile is None:
				last_error = f"Unknown agent: {agent_id}"
				logger.warning(f"[{task_id}] {subtask.id}: {last_error}")
				continue

			try:
				async with semaphore:
					if self.agent_timeout is not None:
						agent_output = await asyncio.wait_for(
							self.executor.invoke(profile, subtask, context),
							timeout=self.agent_timeout,
						)
					else:
						agent_output = await self.executor.invoke(profile, subtask, context)

				# Malformed output counts as a failed call
				result = SubtaskResult(
					subtask_id=subtask.id,
					agent_id=agent_id,
					output=agent_output.output,
					success=True,
					confidence=min(1.0, assignment.routing_confidence * (self.fallback_decay ** hop)),
					duration_ms=self._elapsed_ms(start),
					fallback_hops=hop,
				)
			except asyncio.TimeoutError:
				last_error = f"{agent_id} timed out after {self.agent_timeout}s"
				logger.warning(f"[{task_id}] {subtask.id}: {last_error}")
				continue
			except Exception as e:
				last_error = str(e) or type(e).__name__
				logger.warning(f"[{task_id}] {subtask.id}: agent {agent_id} failed: {last_error}")
				continue

			if hop:
				logger.info(f"[{task_id}] {subtask.id} recovered by fallback {agent_id} after {hop} hop(s)")
			return result

		logger.error(f"[{task_id}] {subtask.id}: all agents failed ({last_error})")
		return SubtaskResult(
			subtask_id=subtask.id,
			agent_id=assignment.primary_agent_id,
			output="",
			success=False,
			confidence=0.0,
			duration_ms=self._elapsed_ms(start),
			error=last_error,
		)

	@staticmethod
	def _elapsed_ms(start: float) -> int:
		return max(0, int((time.monotonic() - start) * 1000))
