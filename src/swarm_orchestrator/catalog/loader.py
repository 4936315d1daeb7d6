"""
Catalog Loader - Loads specialist agent profiles from a versioned YAML file.

The catalog is static configuration: it is read once, validated, and never
mutated during a run. Concurrent runs share the same instance.

Expected format:
```
version: "2026.1"
generalist: general
agents:
  - id: math-specialist
    display_name: Math Specialist
    priority: 4
    capabilities: [math, calculus, statistics]
    system_prompt: |
      ...
```
"""

import logging
from pathlib import Path
from typing import Iterator, Optional

import yaml
from pydantic import ValidationError

from ..errors import CatalogError
from ..models import AgentProfile

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).parent / "default_catalog.yaml"


class AgentCatalog:
	"""Read-only, ordered collection of agent profiles."""

	def __init__(
		self,
		agents: list[AgentProfile],
		generalist_id: str = "general",
		version: str = "unversioned",
	):
		"""
		Initialize the catalog.

		Args:
			agents: Profiles in routing tie-break order
			generalist_id: Agent used when no specialist clears the routing threshold
			version: Catalog version string

		Raises:
			CatalogError: On duplicate ids or a missing generalist
		"""
		seen: set[str] = set()
		for agent in agents:
			if agent.id in seen:
				raise CatalogError(f"Duplicate agent id in catalog: {agent.id}")
			seen.add(agent.id)

		if generalist_id not in seen:
			raise CatalogError(f"Generalist agent '{generalist_id}' is not in the catalog")

		self._agents: tuple[AgentProfile, ...] = tuple(agents)
		self._by_id = {a.id: a for a in self._agents}
		self.generalist_id = generalist_id
		self.version = version

	def __iter__(self) -> Iterator[AgentProfile]:
		return iter(self._agents)

	def __len__(self) -> int:
		return len(self._agents)

	def __contains__(self, agent_id: object) -> bool:
		return agent_id in self._by_id

	@property
	def agents(self) -> tuple[AgentProfile, ...]:
		return self._agents

	@property
	def generalist(self) -> AgentProfile:
		return self._by_id[self.generalist_id]

	def get(self, agent_id: str) -> Optional[AgentProfile]:
		"""Get a profile by id."""
		return self._by_id.get(agent_id)


def parse_catalog(data: dict, generalist_id: Optional[str] = None, source: str = "<memory>") -> AgentCatalog:
	"""
	Build a catalog from already-parsed YAML data.

	Args:
		data: Mapping with ``agents`` and optional ``version``/``generalist``
		generalist_id: Overrides the file's ``generalist`` entry
		source: Description of where the data came from, for error messages

	Returns:
		AgentCatalog
	"""
	if not isinstance(data, dict) or not isinstance(data.get("agents"), list):
		raise CatalogError(f"Catalog {source} must contain an 'agents' list")

	profiles = []
	for entry in data["agents"]:
		try:
			profiles.append(AgentProfile(**entry))
		except (TypeError, ValidationError) as e:
			raise CatalogError(f"Invalid agent entry in {source}: {e}") from e

	return AgentCatalog(
		profiles,
		generalist_id=generalist_id or data.get("generalist", "general"),
		version=str(data.get("version", "unversioned")),
	)


def load_catalog(path: Optional[Path] = None, generalist_id: Optional[str] = None) -> AgentCatalog:
	"""
	Load an agent catalog from YAML.

	Args:
		path: Catalog file; the packaged default catalog if None
		generalist_id: Overrides the file's designated generalist

	Returns:
		AgentCatalog
	"""
	catalog_path = Path(path) if path else DEFAULT_CATALOG_PATH

	if not catalog_path.exists():
		raise CatalogError(f"Catalog file not found: {catalog_path}")

	try:
		data = yaml.safe_load(catalog_path.read_text(encoding="utf-8"))
	except yaml.YAMLError as e:
		raise CatalogError(f"Invalid YAML in {catalog_path}: {e}") from e

	catalog = parse_catalog(data, generalist_id=generalist_id, source=str(catalog_path))
	logger.info(f"Loaded agent catalog {catalog.version} with {len(catalog)} agents from {catalog_path}")
	return catalog
