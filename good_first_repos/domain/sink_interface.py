"""Artifact sink interface (port) for persisting the generated module.

This is the port in hexagonal architecture that the infrastructure layer implements.
"""
from abc import ABC, abstractmethod


class IArtifactSink(ABC):
    """Abstract interface for storing the finished output text."""

    @abstractmethod
    def write(self, text: str) -> None:
        """Persist the generated text.

        Failures surface to the caller as OSError and are not retried.

        Args:
            text: Complete artifact contents
        """
        pass

    @abstractmethod
    def ensure_writable(self) -> None:
        """Check that the destination can be written before any work starts.

        Raises:
            ConfigurationError: When the destination is not writable
        """
        pass
