"""Concurrent candidate generation."""

from qsfuzz.orchestrator.pool import CandidatePool, PoolStats

__all__ = [
    "CandidatePool",
    "PoolStats",
]
