"""
Verifier - Cross-checks claims extracted from agent outputs.

Every claim taken from a successful output is checked against every
result of the run, including the one it came from:

- a case-insensitive substring match confirms the claim
- otherwise a claim word directly next to a negation word
  ("not flat", "flat never") contradicts it

confidence = confirmations / (confirmations + contradictions)
"""

import logging
import re
from typing import Iterable

from ..models import SubtaskResult, VerificationResult

logger = logging.getLogger(__name__)

NEGATION_WORDS = frozenset({"not", "no", "never", "false", "incorrect", "wrong"})

MIN_CLAIM_LENGTH = 20
MAX_CLAIM_LENGTH = 200

_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_WORD = re.compile(r"[\w'-]+")


def extract_claims(results: Iterable[SubtaskResult]) -> list[str]:
	"""
	Extract candidate claims from successful results.

	Outputs are split on sentence terminators; spans of 20-199 characters
	are kept and deduplicated across results in first-seen order.
	"""
	claims: dict[str, None] = {}
	for result in results:
		if not result.success:
			continue
		for sentence in _SENTENCE_SPLIT.split(result.output):
			sentence = sentence.strip()
			if MIN_CLAIM_LENGTH <= len(sentence) < MAX_CLAIM_LENGTH:
				claims.setdefault(sentence, None)
	return list(claims)


def _words(text: str) -> list[str]:
	return _WORD.findall(text.lower())


def detect_contradiction(claim: str, output: str) -> bool:
	"""True if a claim word sits directly next to a negation word in the output."""
	claim_words = set(_words(claim))
	tokens = _words(output)

	for left, right in zip(tokens, tokens[1:]):
		if left in NEGATION_WORDS and right in claim_words:
			return True
		if right in NEGATION_WORDS and left in claim_words:
			return True
	return False


def describe_confidence(confirmed: int, contradicted: int, confidence: float) -> str:
	"""Human-readable label for a confidence band."""
	if confidence >= 0.9:
		return f"Strong consensus: {confirmed} agents agree, {contradicted} disagree."
	if confidence >= 0.7:
		return f"Majority consensus: {confirmed} agents agree, {contradicted} disagree."
	if confidence >= 0.5:
		return (
			f"Disputed: {confirmed} agents agree, {contradicted} disagree. "
			f"Further verification needed."
		)
	return f"Contradicted: {contradicted} agents disagree, only {confirmed} agree."


class ClaimVerifier:
	"""
	Independent verification of agent outputs.

	Stateless; one instance can serve concurrent runs.
	"""

	def __init__(self, threshold: float = 0.7):
		"""
		Initialize the verifier.

		Args:
			threshold: Minimum confidence for a claim to count as verified
		"""
		self.threshold = threshold

	def verify(self, claim: str, sources: list[SubtaskResult]) -> VerificationResult:
		"""Check one claim against every source result."""
		claim_lower = claim.lower()
		verified_by: set[str] = set()
		contradicted_by: set[str] = set()

		for source in sources:
			if claim_lower in source.output.lower():
				verified_by.add(source.agent_id)
			elif detect_contradiction(claim, source.output):
				contradicted_by.add(source.agent_id)

		total = len(verified_by) + len(contradicted_by)
		confidence = len(verified_by) / total if total else 0.0

		return VerificationResult(
			claim=claim,
			verified=confidence >= self.threshold,
			confidence=confidence,
			verified_by=verified_by,
			contradicted_by=contradicted_by,
			reasoning=describe_confidence(len(verified_by), len(contradicted_by), confidence),
		)

	async def verify_all(self, results: list[SubtaskResult]) -> list[VerificationResult]:
		"""Extract claims from all successful results and verify each."""
		claims = extract_claims(results)
		verifications = [self.verify(claim, results) for claim in claims]

		verified = sum(1 for v in verifications if v.verified)
		logger.info(f"Verified {verified}/{len(verifications)} claims")
		return verifications
