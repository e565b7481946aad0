from mapaxis.session import MapSession, load_capabilities_and_config, reconcile

__all__ = ["MapSession", "load_capabilities_and_config", "reconcile"]
