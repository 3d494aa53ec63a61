"""
Log Alert Evaluation Engine.

Periodically re-runs stored, parameterized alert queries against a log corpus
scoped to a stream and to a rotating set of index partitions, and turns the
outcome into a triggered/non-triggered verdict carrying evidence.

This package provides:
- Data models for streams, time ranges, search results and verdicts
- Abstract interfaces for the search backend and index sets
- Index set resolution over rotating write aliases
- Alert condition variants and their factory
- The evaluation driver (alert scanner)
- Configuration management
"""

__version__ = "0.1.0"
