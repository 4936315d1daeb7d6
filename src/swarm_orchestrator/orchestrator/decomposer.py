"""
Decomposer - Turns a task description into a dependency graph of subtasks.

The default KeywordDecomposer classifies the description against fixed
keyword vocabularies (research, analysis, code, math) and emits one subtask
per matched category. Any object with a matching ``decompose`` method can be
passed to the orchestrator instead.
"""

import logging
import re
import time
from dataclasses import dataclass
from typing import Optional, Protocol

from ..errors import CyclicDependencyError
from ..models import ConversationHistory, Subtask

logger = logging.getLogger(__name__)


class Decomposer(Protocol):
	def decompose(self, description: str, context: ConversationHistory) -> list[Subtask]:
		...


@dataclass(frozen=True)
class CategoryRule:
	"""Keyword vocabulary and subtask template for one category."""
	category: str
	pattern: re.Pattern
	prefix: str
	capabilities: tuple[str, ...]
	priority: int
	complexity: int
	depends_on: Optional[str] = None


class KeywordDecomposer:
	"""
	Rule-based decomposition.

	Each category whose vocabulary matches produces exactly one subtask.
	Analysis depends on research when both match ("analyze what was found");
	every other subtask is independent. No match yields one generic subtask.
	"""

	RULES = (
		CategoryRule(
			category="research",
			pattern=re.compile(r"search|find|research|look up|investigate", re.IGNORECASE),
			prefix="Research",
			capabilities=("web_search", "rag", "search"),
			priority=4,
			complexity=6,
		),
		CategoryRule(
			category="analysis",
			pattern=re.compile(r"analyze|examine|evaluate|assess", re.IGNORECASE),
			prefix="Analyze",
			capabilities=("analyze", "evaluate", "reasoning"),
			priority=3,
			complexity=7,
			depends_on="research",
		),
		CategoryRule(
			category="code",
			pattern=re.compile(r"code|program|implement|build|create", re.IGNORECASE),
			prefix="Implement",
			capabilities=("python", "javascript", "code"),
			priority=4,
			complexity=8,
		),
		CategoryRule(
			category="math",
			pattern=re.compile(r"calculate|compute|math|equation|formula", re.IGNORECASE),
			prefix="Calculate",
			capabilities=("math", "calculate", "statistics"),
			priority=3,
			complexity=5,
		),
	)

	GENERAL_CAPABILITIES = ("conversation", "qa")

	def decompose(self, description: str, context: ConversationHistory) -> list[Subtask]:
		"""
		Decompose a task into subtasks.

		Args:
			description: The task text (may be empty)
			context: Prior dialogue, unused by the keyword heuristic

		Returns:
			At least one subtask; the dependency relation is acyclic
		"""
		stamp = time.time_ns() // 1_000_000
		created: dict[str, Subtask] = {}

		for rule in self.RULES:
			if not rule.pattern.search(description):
				continue

			dependencies = set()
			if rule.depends_on and rule.depends_on in created:
				dependencies.add(created[rule.depends_on].id)

			created[rule.category] = Subtask(
				id=f"sub-{stamp}-{rule.category}",
				description=f"{rule.prefix}: {description}",
				dependencies=dependencies,
				required_capabilities=set(rule.capabilities),
				priority=rule.priority,
				estimated_complexity=rule.complexity,
				category=rule.category,
			)

		if not created:
			created["general"] = Subtask(
				id=f"sub-{stamp}-general",
				description=description,
				required_capabilities=set(self.GENERAL_CAPABILITIES),
				priority=2,
				estimated_complexity=4,
				category="general",
			)

		subtasks = list(created.values())
		logger.info(
			f"Decomposed task into {len(subtasks)} subtask(s): "
			f"{', '.join(s.category for s in subtasks)}"
		)
		return subtasks


def topological_order(subtasks: list[Subtask]) -> list[str]:
	"""
	Order subtask ids so every subtask follows its dependencies.

	Dependencies naming ids outside ``subtasks`` are ignored.

	Raises:
		CyclicDependencyError: If the dependency relation has a cycle
	"""
	ids = {s.id for s in subtasks}
	remaining = {s.id: {d for d in s.dependencies if d in ids} for s in subtasks}
	order: list[str] = []

	while remaining:
		ready = [sid for sid, deps in remaining.items() if not deps]
		if not ready:
			raise CyclicDependencyError(sorted(remaining))
		for sid in ready:
			order.append(sid)
			del remaining[sid]
		for deps in remaining.values():
			deps.difference_update(ready)

	return order


def ensure_acyclic(subtasks: list[Subtask]) -> None:
	"""Raise CyclicDependencyError if the subtasks contain a dependency cycle."""
	topological_order(subtasks)
