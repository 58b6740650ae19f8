"""
Infrastructure implementations for package state storage.
"""
