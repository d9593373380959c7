"""Response Cache Implementation.

Provides the durable key-value store for successful text responses,
keyed by normalized request fingerprints.
Bounded Context: Cache Management
"""
