"""
mp_integration – outbound HTTP adapter for message-driven integration flows.

Import path convention::

    from mp_integration.kernel.messaging import Message
    from mp_integration.adapters.http import FluentHttpClient, HttpTemplate
    from mp_integration.adapters.http.outbound import Http, HttpRequestExecutingMessageHandler
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
