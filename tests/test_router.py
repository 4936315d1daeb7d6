"""Tests for capability routing."""

import pytest
from pydantic import ValidationError

from swarm_orchestrator.catalog import load_catalog
from swarm_orchestrator.models import AgentAssignment
from swarm_orchestrator.orchestrator.router import CapabilityRouter

from .helpers import make_agent, make_catalog, make_subtask


@pytest.fixture(scope="module")
def catalog():
	return load_catalog()


@pytest.fixture
def router():
	return CapabilityRouter()


class TestScoring:
	"""Score formula components."""

	def test_full_overlap_high_priority_complex(self, router):
		agent = make_agent("a", ["x", "y"], priority=4)
		subtask = make_subtask(capabilities=["x", "y"], complexity=8)
		assert router.score_agent(subtask, agent) == pytest.approx(1.0)

	def test_partial_overlap(self, router):
		agent = make_agent("a", ["x"], priority=3)
		subtask = make_subtask(capabilities=["x", "y"], complexity=5)
		assert router.score_agent(subtask, agent) == pytest.approx(0.35 + 0.2)

	def test_low_priority_signal(self, router):
		agent = make_agent("a", ["x"], priority=2)
		subtask = make_subtask(capabilities=["x"], complexity=5)
		assert router.score_agent(subtask, agent) == pytest.approx(0.7 + 0.1)

	def test_simple_task_bonus_for_any_agent(self, router):
		agent = make_agent("a", ["x"], priority=1)
		subtask = make_subtask(capabilities=["x"], complexity=2)
		assert router.score_agent(subtask, agent) == pytest.approx(0.7 + 0.05 + 0.05)

	def test_empty_requirements_half_overlap(self, router):
		agent = make_agent("a", ["x"], priority=3)
		subtask = make_subtask(capabilities=[], complexity=5)
		assert router.score_agent(subtask, agent) == pytest.approx(0.35 + 0.2)

	def test_score_capped_at_one(self, router):
		agent = make_agent("a", ["x"], priority=5)
		subtask = make_subtask(capabilities=["x"], complexity=9)
		assert router.score_agent(subtask, agent) <= 1.0

	def test_capability_match_is_case_sensitive(self, router):
		agent = make_agent("a", ["pandas"], priority=3)
		subtask = make_subtask(capabilities=["Pandas"], complexity=5)
		assert router.score_agent(subtask, agent) == pytest.approx(0.2)


class TestFindCandidates:
	"""Ranking against the packaged catalog."""

	@pytest.mark.parametrize("capabilities,complexity,expected", [
		(["pandas", "matplotlib", "statistics"], 7, "data-analyst"),
		(["code-review", "security-audit"], 8, "code-reviewer"),
		(["deep-research", "multi-source", "consensus"], 9, "web-researcher"),
		(["math", "calculate", "statistics"], 5, "math-specialist"),
	])
	def test_best_specialist_first(self, router, catalog, capabilities, expected, complexity):
		subtask = make_subtask(capabilities=capabilities, complexity=complexity)
		candidates = router.find_candidates(subtask, catalog)

		assert candidates[0].agent.id == expected
		assert candidates[0].score > 0.5

	def test_sorted_descending_above_threshold(self, router, catalog):
		subtask = make_subtask(capabilities=["math", "statistics"], complexity=6)
		candidates = router.find_candidates(subtask, catalog)

		scores = [c.score for c in candidates]
		assert scores == sorted(scores, reverse=True)
		assert all(s >= 0.3 for s in scores)
		assert candidates[0].agent.id == "math-specialist"
		assert candidates[0].score > 0.6
		assert "data-analyst" in [c.agent.id for c in candidates]

	def test_generalist_fallback(self, router, catalog):
		"""Nothing above threshold routes to the generalist at 0.5."""
		subtask = make_subtask(capabilities=["quantum-simulation"], complexity=5)
		candidates = router.find_candidates(subtask, catalog)

		assert len(candidates) == 1
		assert candidates[0].agent.id == "general"
		assert candidates[0].score == 0.5

	def test_ties_keep_catalog_order(self, router):
		catalog = make_catalog(
			make_agent("first", ["x"], priority=3),
			make_agent("second", ["x"], priority=3),
		)
		candidates = router.find_candidates(make_subtask(capabilities=["x"]), catalog)
		assert [c.agent.id for c in candidates[:2]] == ["first", "second"]


class TestAssign:
	"""Assignment construction."""

	def test_primary_and_two_fallbacks(self, router):
		catalog = make_catalog(
			make_agent("a", ["x", "y"], priority=4),
			make_agent("b", ["x"], priority=3),
			make_agent("c", ["y"], priority=3),
			make_agent("d", ["x"], priority=3),
		)
		assignment = router.assign(make_subtask(capabilities=["x", "y"]), catalog)

		assert assignment.primary_agent_id == "a"
		assert assignment.fallback_agent_ids == ["b", "c"]
		assert assignment.primary_agent_id not in assignment.fallback_agent_ids
		assert assignment.routing_confidence == pytest.approx(0.9)

	def test_generalist_assignment_has_no_fallbacks(self, router, catalog):
		assignment = router.assign(make_subtask(capabilities=["conversation", "qa"], complexity=4), catalog)

		assert assignment.primary_agent_id == "general"
		assert assignment.fallback_agent_ids == []
		assert assignment.routing_confidence == 0.5

	def test_max_fallbacks_configurable(self, catalog):
		router = CapabilityRouter(max_fallbacks=0)
		assignment = router.assign(make_subtask(capabilities=["math", "statistics"]), catalog)
		assert assignment.fallback_agent_ids == []

	def test_assignment_rejects_primary_in_fallbacks(self):
		with pytest.raises(ValidationError):
			AgentAssignment(
				subtask=make_subtask(),
				primary_agent_id="a",
				fallback_agent_ids=["b", "a"],
				routing_confidence=0.5,
			)

	def test_assignment_rejects_duplicate_fallbacks(self):
		with pytest.raises(ValidationError):
			AgentAssignment(
				subtask=make_subtask(),
				primary_agent_id="a",
				fallback_agent_ids=["b", "b"],
				routing_confidence=0.5,
			)
