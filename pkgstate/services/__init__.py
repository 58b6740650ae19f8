"""
Services built on the package state domain.
"""
