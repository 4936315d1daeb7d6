"""
Router - Scores catalog agents against a subtask's required capabilities.

score = capability_overlap * 0.7 + priority_signal + complexity_signal,
capped at 1.0. Capability tags are compared exactly (case-sensitive).
"""

import logging
from dataclasses import dataclass

from ..catalog import AgentCatalog
from ..models import AgentAssignment, AgentProfile, Subtask

logger = logging.getLogger(__name__)

CAPABILITY_WEIGHT = 0.7
EMPTY_REQUIREMENT_OVERLAP = 0.5
GENERALIST_CONFIDENCE = 0.5


@dataclass
class RouteCandidate:
	"""An agent and how well it fits a subtask."""
	agent: AgentProfile
	score: float


class CapabilityRouter:
	"""
	Ranks agents for subtasks and builds assignments.

	Never returns an empty candidate list: when nothing clears the
	threshold, the catalog's generalist is returned at 0.5.
	"""

	def __init__(self, min_score: float = 0.3, max_fallbacks: int = 2):
		"""
		Initialize the router.

		Args:
			min_score: Candidates scoring below this are discarded
			max_fallbacks: Maximum fallback agents per assignment
		"""
		self.min_score = min_score
		self.max_fallbacks = max_fallbacks

	@staticmethod
	def score_agent(subtask: Subtask, agent: AgentProfile) -> float:
		"""Score one agent for one subtask, in [0, 1]."""
		required = subtask.required_capabilities
		if required:
			overlap = len(required & agent.capabilities) / len(required)
		else:
			overlap = EMPTY_REQUIREMENT_OVERLAP
		score = overlap * CAPABILITY_WEIGHT

		# Priority signal (0-0.2)
		if agent.priority >= 3:
			score += 0.2
		else:
			score += agent.priority * 0.05

		# Complexity signal (0-0.1): specialised agents take complex work
		if subtask.estimated_complexity >= 7 and agent.priority >= 3:
			score += 0.1
		elif subtask.estimated_complexity <= 3:
			score += 0.05

		return min(score, 1.0)

	def find_candidates(self, subtask: Subtask, catalog: AgentCatalog) -> list[RouteCandidate]:
		"""
		Rank catalog agents for a subtask, best first.

		Ties keep catalog order.
		"""
		candidates = []
		for agent in catalog:
			score = self.score_agent(subtask, agent)
			if score >= self.min_score:
				candidates.append(RouteCandidate(agent=agent, score=score))

		candidates.sort(key=lambda c: c.score, reverse=True)

		if not candidates:
			logger.info(
				f"No agent cleared {self.min_score} for {subtask.id}, "
				f"using generalist {catalog.generalist_id}"
			)
			return [RouteCandidate(agent=catalog.generalist, score=GENERALIST_CONFIDENCE)]

		return candidates

	def assign(self, subtask: Subtask, catalog: AgentCatalog) -> AgentAssignment:
		"""Pick the top candidate as primary and the next few as fallbacks."""
		candidates = self.find_candidates(subtask, catalog)
		primary = candidates[0]
		fallbacks = [c.agent.id for c in candidates[1:1 + self.max_fallbacks]]

		logger.debug(
			f"Routed {subtask.id} to {primary.agent.id} ({primary.score:.2f}), "
			f"fallbacks: {fallbacks or 'none'}"
		)
		return AgentAssignment(
			subtask=subtask,
			primary_agent_id=primary.agent.id,
			fallback_agent_ids=fallbacks,
			routing_confidence=primary.score,
		)

	def route(self, subtasks: list[Subtask], catalog: AgentCatalog) -> list[AgentAssignment]:
		"""Assign every subtask."""
		return [self.assign(subtask, catalog) for subtask in subtasks]
