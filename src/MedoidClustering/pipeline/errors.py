"""Custom exception hierarchy for the medoid clustering trainer."""
from __future__ import annotations


class ClusteringError(Exception):
    """Base exception for the medoid clustering trainer."""


class PreconditionError(ClusteringError, ValueError):
    """Raised when arguments or input data violate a precondition.

    Always raised before any optimization work starts.
    """


class ConfigurationError(PreconditionError):
    """Raised when a training configuration holds an invalid value."""


class TrainingError(ClusteringError):
    """Raised when the training stage encounters an unrecoverable error."""
