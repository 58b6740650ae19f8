"""
Cache Domain Module

Entities, value objects and the repository interface for package state.
"""
