from dynamics_assistant.connector.base import CRMConnector
from dynamics_assistant.connector.in_memory import InMemoryConnector

__all__ = ["CRMConnector", "InMemoryConnector"]
