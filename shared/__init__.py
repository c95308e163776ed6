"""
Shared Kernel

Base classes and utilities shared across all bounded contexts: domain
building blocks, error taxonomy, unit of work, message bus and the policy
configuration snapshot.
"""
