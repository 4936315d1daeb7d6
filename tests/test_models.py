"""Tests for orchestration models."""

import pytest
from pydantic import ValidationError

from swarm_orchestrator.models import (
	AgentAssignment,
	ConsensusDecision,
	ConsensusRequest,
	OrchestrationResult,
	Subtask,
	Task,
)

from .helpers import make_result, make_subtask


def test_subtask_bounds():
	with pytest.raises(ValidationError):
		Subtask(id="s", description="d", priority=6)
	with pytest.raises(ValidationError):
		Subtask(id="s", description="d", estimated_complexity=0)


def test_agent_chain_order():
	assignment = AgentAssignment(
		subtask=make_subtask("s1"),
		primary_agent_id="a",
		fallback_agent_ids=["b", "c"],
		routing_confidence=0.7,
	)
	assert assignment.subtask_id == "s1"
	assert assignment.agent_chain == ["a", "b", "c"]


def test_decision_winner_must_be_an_option():
	with pytest.raises(ValidationError):
		ConsensusDecision(
			question="Q?",
			options=["A", "B"],
			votes={"x": "C"},
			winner="C",
			confidence=1.0,
			unanimous=True,
		)


def test_consensus_request_needs_options():
	with pytest.raises(ValidationError):
		ConsensusRequest(question="Q?", options=[])


def test_success_rate():
	result = OrchestrationResult(
		task_id="moa-1",
		subtask_results=[
			make_result("a", "ok", subtask_id="s1"),
			make_result("b", "", subtask_id="s2", success=False),
		],
	)
	assert result.success_rate == 0.5
	assert OrchestrationResult(task_id="moa-2").success_rate == 0.0


def test_task_defaults():
	task = Task(description="Summarize")
	assert task.conversation_context == []

	with pytest.raises(ValidationError):
		Task(description=None)
