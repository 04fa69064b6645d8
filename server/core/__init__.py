from .connection import ConnectionContext, ConnectionHandler, RequestCallback, SessionState
from .listener import Listener, serve
from .observer import CallbackObserver, CompositeObserver, ConnectionObserver, LoggingObserver

__all__ = [
    "ConnectionContext",
    "ConnectionHandler",
    "RequestCallback",
    "SessionState",
    "Listener",
    "serve",
    "ConnectionObserver",
    "LoggingObserver",
    "CallbackObserver",
    "CompositeObserver",
]
