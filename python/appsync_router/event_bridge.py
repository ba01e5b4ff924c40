"""In-process event bridge for resolver assembly lifecycle events.

This module provides the EventBridge class that wraps pyee's EventEmitter
to publish what the router creates while data sources are registered.

Example:
    >>> from appsync_router import EventBridge, EventNames
    >>>
    >>> bridge = EventBridge.instance()
    >>> bridge.start()
    >>>
    >>> def on_pipeline_updated(resolver, function_ids):
    ...     print(f"{resolver.resolver_id}: {function_ids}")
    ...
    >>> bridge.subscribe(EventNames.PIPELINE_UPDATED, on_pipeline_updated)
    >>>
    >>> bridge.stop()
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from pyee.base import EventEmitter

from .logging import log_debug, log_info, log_trace


class EventNames:
    """Constants for event names used in the event bridge.

    Attributes:
        DATA_SOURCE_REGISTERED: Emitted after a data source's resolvers are assembled.
        RESOLVER_CREATED: Emitted when a unit or pipeline resolver is created.
        FUNCTION_CREATED: Emitted when a pipeline function is created.
        PIPELINE_UPDATED: Emitted when a pipeline's function list is rewritten.
    """

    DATA_SOURCE_REGISTERED = "data_source.registered"
    RESOLVER_CREATED = "resolver.created"
    FUNCTION_CREATED = "function.created"
    PIPELINE_UPDATED = "pipeline.updated"


class EventBridge:
    """In-process event bus for assembly events.

    Implemented as a singleton so every router in a process can share one
    bus; routers also accept an explicit instance.

    Events:
        data_source.registered: (DataSourceResource)
        resolver.created: (ResolverResource)
        function.created: (FunctionResource)
        pipeline.updated: (ResolverResource, list[str])
    """

    _instance: EventBridge | None = None

    def __init__(self) -> None:
        self._emitter = EventEmitter()
        self._active = False

    @classmethod
    def instance(cls) -> EventBridge:
        """Get the singleton EventBridge instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset the singleton instance.

        This is primarily for testing to ensure a clean state between tests.
        Stops the current instance if active before resetting.
        """
        if cls._instance is not None:
            cls._instance.stop()
        cls._instance = None

    def start(self) -> None:
        """Activate the event bridge.

        Events will only be published when the bridge is active.
        Calling start() multiple times is safe.
        """
        if self._active:
            return
        self._active = True
        log_info("EventBridge started")

    def stop(self) -> None:
        """Deactivate the event bridge and remove all listeners."""
        if not self._active:
            return
        self._active = False
        self._emitter.remove_all_listeners()
        log_info("EventBridge stopped")

    def subscribe(self, event: str, handler: Callable[..., Any]) -> None:
        """Subscribe ``handler`` to ``event``."""
        self._emitter.on(event, handler)
        handler_name = getattr(handler, "__name__", str(handler))
        log_debug(f"Subscribed to {event}: {handler_name}")

    def unsubscribe(self, event: str, handler: Callable[..., Any]) -> None:
        self._emitter.remove_listener(event, handler)
        handler_name = getattr(handler, "__name__", str(handler))
        log_debug(f"Unsubscribed from {event}: {handler_name}")

    def publish(self, event: str, *args: Any, **kwargs: Any) -> None:
        """Publish an event to all subscribers.

        Events published while the bridge is inactive are dropped.
        """
        if not self._active:
            log_trace(f"EventBridge not active, dropping event: {event}")
            return

        log_debug(f"Publishing event: {event}")
        self._emitter.emit(event, *args, **kwargs)

    def listener_count(self, event: str) -> int:
        return len(self._emitter.listeners(event))

    @property
    def is_active(self) -> bool:
        return self._active


__all__ = ["EventBridge", "EventNames"]
