"""
Module: exceptions
Purpose: Custom exception hierarchy for namemend.
"""


class NamemendError(Exception):
    """Base exception for namemend."""

    pass


class ConfigurationError(NamemendError):
    pass


class TraversalError(NamemendError):
    pass


class MutationError(NamemendError):
    pass
