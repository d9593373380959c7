"""AI Model Implementations.

Contains concrete transports for the supported generative-AI vendors.
"""
