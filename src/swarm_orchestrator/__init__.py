"""swarm-orchestrator - Route a task to specialist agents, cross-check and synthesize."""

from .catalog import AgentCatalog, load_catalog
from .config import Config, get_config, load_config
from .events import EventChannel
from .executors import AgentOutput, CommandAgentExecutor, CommandVoteExecutor
from .logging_config import setup_logging
from .models import (
	AgentProfile,
	ChatMessage,
	ConsensusRequest,
	OrchestrationResult,
	Subtask,
	SubtaskResult,
	VerificationResult,
)
from .orchestrator import SwarmOrchestrator

__version__ = "0.1.0"

__all__ = [
	"SwarmOrchestrator",
	"AgentCatalog",
	"load_catalog",
	"Config",
	"get_config",
	"load_config",
	"setup_logging",
	"EventChannel",
	"AgentOutput",
	"CommandAgentExecutor",
	"CommandVoteExecutor",
	"AgentProfile",
	"ChatMessage",
	"ConsensusRequest",
	"OrchestrationResult",
	"Subtask",
	"SubtaskResult",
	"VerificationResult",
]
