"""Tests for the command-backed executors and prompt helpers."""

import shlex
import sys

import pytest

from swarm_orchestrator.errors import AgentInvocationError
from swarm_orchestrator.executors import (
	CommandAgentExecutor,
	CommandRunner,
	CommandVoteExecutor,
	build_subtask_prompt,
	build_vote_prompt,
	match_option,
	render_context,
)
from swarm_orchestrator.models import AgentProfile, ChatMessage

from .helpers import make_subtask

PYTHON = shlex.quote(sys.executable)


@pytest.fixture
def profile():
	return AgentProfile(
		id="math-specialist",
		display_name="Math Specialist",
		capabilities=frozenset({"math"}),
		priority=4,
		system_prompt="You are a math specialist.\n",
	)


class TestPrompts:
	"""Prompt assembly."""

	def test_render_context_uses_name_then_role(self):
		context = [
			ChatMessage(role="user", content="hi"),
			ChatMessage(role="assistant", name="general", content="hello"),
		]
		assert render_context(context) == "[user]: hi\n[general]: hello"

	def test_render_context_limits_messages(self):
		context = [ChatMessage(role="user", content=str(i)) for i in range(30)]
		rendered = render_context(context, limit=3)
		assert rendered.splitlines() == ["[user]: 27", "[user]: 28", "[user]: 29"]

	def test_subtask_prompt(self, profile):
		subtask = make_subtask("s1")
		prompt = build_subtask_prompt(profile, subtask, [ChatMessage(role="user", content="earlier")])

		assert prompt.startswith("You are a math specialist.")
		assert "## Conversation so far\n[user]: earlier" in prompt
		assert prompt.endswith("## Task\nWork on s1")

	def test_subtask_prompt_without_context(self, profile):
		prompt = build_subtask_prompt(profile, make_subtask("s1"), [])
		assert "Conversation so far" not in prompt

	def test_vote_prompt_lists_options(self, profile):
		prompt = build_vote_prompt(profile, "Which?", ["A", "B"], [])

		assert "## Decision\nWhich?" in prompt
		assert "- A\n- B" in prompt


class TestMatchOption:
	"""Mapping replies onto options."""

	@pytest.mark.parametrize("reply,expected", [
		("Python", "Python"),
		("  python.  ", "Python"),
		("**Rust**", "Rust"),
		("I would go with Rust, not Python", "Rust"),
		("No idea", None),
	])
	def test_match(self, reply, expected):
		assert match_option(reply, ["Python", "Rust"]) == expected

	def test_exact_match_beats_substring(self):
		assert match_option("Java", ["JavaScript", "Java"]) == "Java"


class TestCommandRunner:
	"""Subprocess execution."""

	@pytest.mark.asyncio
	async def test_prompt_on_stdin(self):
		runner = CommandRunner(f"{PYTHON} -c \"import sys; print(sys.stdin.read().upper())\"")
		assert await runner.run("a", "hello") == "HELLO"

	@pytest.mark.asyncio
	async def test_missing_command(self):
		runner = CommandRunner("definitely-not-a-real-command-xyz")
		with pytest.raises(AgentInvocationError, match="Command not found") as exc_info:
			await runner.run("a", "hello")
		assert exc_info.value.agent_id == "a"

	@pytest.mark.asyncio
	async def test_non_zero_exit(self):
		runner = CommandRunner(f"{PYTHON} -c \"import sys; sys.stderr.write('bad'); sys.exit(3)\"")
		with pytest.raises(AgentInvocationError, match="exited with 3: bad"):
			await runner.run("a", "hello")

	@pytest.mark.asyncio
	async def test_timeout(self):
		runner = CommandRunner(f"{PYTHON} -c \"import time; time.sleep(5)\"", timeout=0.2)
		with pytest.raises(AgentInvocationError, match="timed out"):
			await runner.run("a", "hello")


class TestCommandExecutors:
	"""Protocol implementations over a command."""

	@pytest.mark.asyncio
	async def test_agent_executor_returns_output(self, profile):
		executor = CommandAgentExecutor(f"{PYTHON} -c \"import sys; print(len(sys.stdin.read()) > 0)\"")

		result = await executor.invoke(profile, make_subtask("s1"), [])

		assert result.output == "True"
		assert result.duration_ms >= 0

	@pytest.mark.asyncio
	async def test_agent_executor_empty_response(self, profile):
		executor = CommandAgentExecutor(f"{PYTHON} -c \"pass\"")

		with pytest.raises(AgentInvocationError, match="Empty response"):
			await executor.invoke(profile, make_subtask("s1"), [])

	@pytest.mark.asyncio
	async def test_vote_executor(self, profile):
		executor = CommandVoteExecutor(f"{PYTHON} -c \"print('My vote: Rust')\"")

		choice = await executor.cast_vote(profile, "Which?", ["Python", "Rust"], [])

		assert choice == "Rust"

	@pytest.mark.asyncio
	async def test_vote_executor_no_option(self, profile):
		executor = CommandVoteExecutor(f"{PYTHON} -c \"print('abstain')\"")

		with pytest.raises(AgentInvocationError, match="names no option"):
			await executor.cast_vote(profile, "Which?", ["Python", "Rust"], [])
