"""
Consensus - Settles multi-option decisions by polling agents.

Every agent casts one vote through the VoteExecutor. The option with the
most votes wins; ties go to the option listed first.
"""

import asyncio
import logging
from collections import Counter

from ..errors import ConsensusError
from ..executors import VoteExecutor
from ..models import AgentProfile, ConsensusDecision, ConversationHistory

logger = logging.getLogger(__name__)


def tally_votes(question: str, options: list[str], votes: dict[str, str]) -> ConsensusDecision:
	"""
	Build a decision from collected votes.

	Raises:
		ConsensusError: If there are no votes
	"""
	if not votes:
		raise ConsensusError(f"No valid votes for: {question}")

	counts = Counter(votes.values())
	# max() returns the first maximal option, so ties go to the earlier one
	winner = max(options, key=lambda option: counts.get(option, 0))
	winning = counts[winner]
	total = len(votes)

	return ConsensusDecision(
		question=question,
		options=list(options),
		votes=dict(votes),
		winner=winner,
		confidence=winning / total,
		unanimous=winning == total,
	)


class ConsensusModule:
	"""Conducts consensus votes among agents."""

	def __init__(self, vote_executor: VoteExecutor, max_concurrency: int = 5):
		"""
		Initialize the consensus module.

		Args:
			vote_executor: Asks a single agent for its vote
			max_concurrency: Maximum votes in flight at once
		"""
		self.vote_executor = vote_executor
		self.max_concurrency = max_concurrency

	async def conduct_consensus_vote(
		self,
		question: str,
		options: list[str],
		agents: list[AgentProfile],
		context: ConversationHistory | None = None,
	) -> ConsensusDecision:
		"""
		Poll every agent once and tally the result.

		Args:
			question: The decision to make
			options: Candidate answers, non-empty
			agents: Voters; each casts exactly one vote
			context: Conversation history given to each voter

		Returns:
			ConsensusDecision

		Raises:
			ValueError: If options or agents are empty
			ConsensusError: If no agent produced a valid vote
		"""
		if not options:
			raise ValueError("Consensus vote needs at least one option")
		if not agents:
			raise ValueError("Consensus vote needs at least one agent")

		context = context or []
		semaphore = asyncio.Semaphore(self.max_concurrency)

		async def poll(agent: AgentProfile) -> tuple[str, str | None]:
			async with semaphore:
				try:
					choice = await self.vote_executor.cast_vote(agent, question, options, context)
				except Exception as e:
					logger.warning(f"Vote from {agent.id} failed, counting as abstention: {e}")
					return agent.id, None

			if choice not in options:
				logger.warning(f"Vote from {agent.id} names unknown option {choice!r}, counting as abstention")
				return agent.id, None
			return agent.id, choice

		ballots = await asyncio.gather(*(poll(agent) for agent in agents))
		votes = {agent_id: choice for agent_id, choice in ballots if choice is not None}

		decision = tally_votes(question, options, votes)
		logger.info(
			f"Consensus on {question!r}: {decision.winner} "
			f"({len(votes)}/{len(agents)} voted, confidence {decision.confidence:.2f})"
		)
		return decision
