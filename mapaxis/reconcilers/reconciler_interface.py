from abc import ABCMeta, abstractmethod

from mapaxis.projections.registry_interface import RegistryInterface
from mapaxis.reconcilers.reconciliation_result import ReconciliationResult
from mapaxis.constructs.reconciliation_input import ReconciliationInput


class ReconcilerInterface(metaclass=ABCMeta):
    """
    Abstract base class defining the interface for projection reconcilers.

    A reconciler checks the projection registry against the capabilities advertised
    by a map server and corrects the registry when they disagree. It runs once,
    after the capabilities and the project configuration have been loaded and before
    any coordinate is transformed.
    """

    @abstractmethod
    def reconcile(
        self, reconciliation_input: ReconciliationInput, registry: RegistryInterface
    ) -> ReconciliationResult:
        """
        Check and, if needed, correct the registry.

        Args:
            reconciliation_input: The loaded capabilities and project configuration
            registry: The projection registry to check; the only object a reconciler may mutate

        Returns:
            A ReconciliationResult describing the decision
        """
