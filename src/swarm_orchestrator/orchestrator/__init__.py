"""Orchestrator module - Decomposition, routing, scheduling, verification, consensus, synthesis."""

from .consensus import ConsensusModule, tally_votes
from .decomposer import Decomposer, KeywordDecomposer, ensure_acyclic, topological_order
from .engine import SwarmOrchestrator
from .router import CapabilityRouter, RouteCandidate
from .scheduler import DependencyScheduler, ExecutionReport
from .synthesizer import Synthesizer
from .verifier import ClaimVerifier, extract_claims

__all__ = [
	"SwarmOrchestrator",
	"Decomposer",
	"KeywordDecomposer",
	"ensure_acyclic",
	"topological_order",
	"CapabilityRouter",
	"RouteCandidate",
	"DependencyScheduler",
	"ExecutionReport",
	"ClaimVerifier",
	"extract_claims",
	"ConsensusModule",
	"tally_votes",
	"Synthesizer",
]
