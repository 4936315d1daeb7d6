"""
Event Channel - In-process publish/subscribe for orchestration lifecycle events.

An EventChannel is created by the host and passed into the orchestrator;
there is no process-wide bus. Publication is fire-and-forget: a failing
subscriber is logged and never affects the run. Concurrent runs may share
one channel, so every event carries the task_id of the run that emitted it.
"""

import logging
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, ClassVar, Optional

logger = logging.getLogger(__name__)

MAX_SNAPSHOT_SIZE = 200


@dataclass(frozen=True)
class OrchestrationEvent:
	"""Base class for lifecycle events."""
	name: ClassVar[str] = "event"

	task_id: str
	timestamp: float = field(default_factory=time.time, kw_only=True)


@dataclass(frozen=True)
class TaskStarted(OrchestrationEvent):
	name: ClassVar[str] = "task-started"

	description: str


@dataclass(frozen=True)
class StatusChanged(OrchestrationEvent):
	name: ClassVar[str] = "status-changed"

	status: str  # planning, executing, verifying, synthesizing


@dataclass(frozen=True)
class AgentSelected(OrchestrationEvent):
	name: ClassVar[str] = "agent-selected"

	agent_id: str
	subtask_id: str


@dataclass(frozen=True)
class TaskCompleted(OrchestrationEvent):
	name: ClassVar[str] = "task-completed"

	duration_ms: int
	agents_used: int


EventHandler = Callable[[OrchestrationEvent], None]


@dataclass(eq=False)
class _Subscription:
	handler: EventHandler
	event_name: Optional[str] = None
	task_id: Optional[str] = None

	def matches(self, event: OrchestrationEvent) -> bool:
		if self.event_name is not None and event.name != self.event_name:
			return False
		if self.task_id is not None and event.task_id != self.task_id:
			return False
		return True


class EventChannel:
	"""
	Append-only broadcast of orchestration events.

	Keeps a bounded snapshot of recent events so observers that attach
	late can hydrate their state.
	"""

	def __init__(self, max_snapshot: int = MAX_SNAPSHOT_SIZE):
		self._subscriptions: list[_Subscription] = []
		self._snapshot: deque[OrchestrationEvent] = deque(maxlen=max_snapshot)

	def subscribe(
		self,
		handler: EventHandler,
		event_name: Optional[str] = None,
		task_id: Optional[str] = None,
	) -> Callable[[], None]:
		"""
		Register a handler.

		Args:
			handler: Called synchronously with each matching event
			event_name: Only deliver events with this name (e.g. "agent-selected")
			task_id: Only deliver events of this run

		Returns:
			Function that removes the subscription
		"""
		subscription = _Subscription(handler=handler, event_name=event_name, task_id=task_id)
		self._subscriptions.append(subscription)

		def unsubscribe() -> None:
			if subscription in self._subscriptions:
				self._subscriptions.remove(subscription)

		return unsubscribe

	def publish(self, event: OrchestrationEvent) -> None:
		"""Deliver an event to all matching subscribers."""
		self._snapshot.append(event)

		for subscription in list(self._subscriptions):
			if not subscription.matches(event):
				continue
			try:
				subscription.handler(event)
			except Exception as e:
				logger.warning(f"Event handler failed for {event.name} ({event.task_id}): {e}")

	def snapshot(self, task_id: Optional[str] = None) -> list[OrchestrationEvent]:
		"""Recent events, oldest first, optionally for a single run."""
		if task_id is None:
			return list(self._snapshot)
		return [e for e in self._snapshot if e.task_id == task_id]

	def latest(self, event_name: str, count: int = 1) -> list[OrchestrationEvent]:
		"""Most recent events with the given name, oldest first."""
		matching = [e for e in self._snapshot if e.name == event_name]
		return matching[-count:] if count > 0 else []

	@property
	def subscriber_count(self) -> int:
		return len(self._subscriptions)

	def clear(self) -> None:
		"""Drop the snapshot and all subscriptions."""
		self._snapshot.clear()
		self._subscriptions.clear()
