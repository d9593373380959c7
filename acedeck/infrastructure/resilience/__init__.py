"""API Resilience Implementations.

Contains the credential pool and the request resilience layer that rotates
credentials, blacklists invalid ones and retries transient failures.
Bounded Context: API Resilience
"""
