"""Tests for swarm-orchestrator."""
