"""Synthesizer - Assembles the final answer from results and verifications."""

import logging

from ..models import ConsensusDecision, SubtaskResult, VerificationResult

logger = logging.getLogger(__name__)

MAX_VERIFIED_FACTS = 5


class Synthesizer:
	"""
	Builds the advisory markdown answer of a run.

	One section per agent (successful outputs only, in encounter order),
	then up to five verified claims.
	"""

	def synthesize(
		self,
		results: list[SubtaskResult],
		verifications: list[VerificationResult],
		decisions: list[ConsensusDecision] | None = None,
	) -> str:
		sections = ["## Synthesis (Multi-Agent Analysis)", ""]

		# dicts keep insertion order, so agents appear as first encountered
		by_agent: dict[str, list[str]] = {}
		for result in results:
			if result.success:
				by_agent.setdefault(result.agent_id, []).append(result.output)

		if not by_agent:
			sections.extend(["_No agent produced a successful result._", ""])

		for agent_id, outputs in by_agent.items():
			sections.append(f"### {agent_id}:")
			sections.extend(outputs)
			sections.append("")

		verified_claims = [v.claim for v in verifications if v.verified]
		if verified_claims:
			sections.append("## Verified Facts (Cross-Checked):")
			sections.extend(f"- {claim}" for claim in verified_claims[:MAX_VERIFIED_FACTS])
			sections.append("")

		if decisions:
			sections.append("## Decisions:")
			sections.extend(
				f"- {d.question} → {d.winner} ({d.confidence:.0%}{', unanimous' if d.unanimous else ''})"
				for d in decisions
			)
			sections.append("")

		return "\n".join(sections).rstrip() + "\n"
