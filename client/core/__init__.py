from .connector import Connector

__all__ = ["Connector"]
