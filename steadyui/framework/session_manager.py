"""
================================================================================
Session Manager
================================================================================

Lifecycle owner of the single shared automation session.

State machine:
    UNINITIALIZED --get_or_create--> LIVE --release--> CLOSED
    CLOSED --get_or_create--> LIVE (new, independent handle)

`get_or_create` is idempotent while LIVE. A failed construction raises
SessionInitError and leaves no handle behind.

The manager is owned by the test-execution context (one per invocation, see
the `session_manager` fixture) and passed by reference. It provides no
locking: concurrent flows must each own their own manager.

Usage:
    with SessionManager(SessionConfig(engine="firefox")) as manager:
        session = manager.get_or_create()
        session.navigate("https://example.com")

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Optional

from loguru import logger

from steadyui.common.config_loader import ConfigLoader

from .browser_backend import launch_playwright_backend
from .errors import SessionInitError
from .session import SessionBackend, SessionConfig, SessionHandle


BackendFactory = Callable[[SessionConfig], SessionBackend]


class SessionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    LIVE = "live"
    CLOSED = "closed"


class SessionManager:
    """
    Lazily constructs, hands out and tears down one session.

    Attributes:
        config: Default construction parameters (read from ConfigLoader when
            neither the manager nor the caller provides any)
    """

    def __init__(
        self,
        config: Optional[SessionConfig] = None,
        backend_factory: BackendFactory = launch_playwright_backend,
    ):
        """
        Initialize session manager.

        Args:
            config: Default session parameters
            backend_factory: Callable building a backend from a SessionConfig
        """
        self.config = config
        self._backend_factory = backend_factory
        self._handle: Optional[SessionHandle] = None
        self._state = SessionState.UNINITIALIZED

    def __enter__(self) -> "SessionManager":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_live(self) -> bool:
        return self._state is SessionState.LIVE

    @property
    def handle(self) -> Optional[SessionHandle]:
        """The live handle, or None when no session is live."""
        return self._handle if self.is_live else None

    def _resolve_config(self, config: Optional[SessionConfig]) -> SessionConfig:
        if config is not None:
            return config
        if self.config is not None:
            return self.config
        return SessionConfig.from_config(ConfigLoader())

    def get_or_create(self, config: Optional[SessionConfig] = None) -> SessionHandle:
        """
        Return the live session, constructing it on first demand.

        Args:
            config: Parameters for construction; ignored while a session is live

        Returns:
            The live SessionHandle (same instance until `release()`)

        Raises:
            SessionInitError: When the backend cannot be constructed
        """
        if self._state is SessionState.LIVE and self._handle is not None:
            return self._handle

        session_config = self._resolve_config(config)
        logger.info(
            f"Initializing {session_config.engine} session "
            f"(headless: {session_config.headless})"
        )
        try:
            backend = self._backend_factory(session_config)
        except SessionInitError:
            logger.error(f"Session initialization failed for engine {session_config.engine}")
            raise
        except Exception as e:
            logger.error(f"Failed to initialize session: {e}")
            raise SessionInitError(f"Session initialization failed: {e}") from e

        self._handle = SessionHandle(backend, session_config)
        self._state = SessionState.LIVE
        logger.debug(f"Session {self._handle.session_id} is live")
        return self._handle

    def release(self) -> None:
        """
        Tear down the live session.

        The handle is marked closed even when the backend fails to shut down
        cleanly; the error is logged. No-op when nothing is live.
        """
        if self._handle is None or self._state is not SessionState.LIVE:
            logger.debug("No live session to release")
            return

        handle = self._handle
        handle._close()
        self._handle = None
        self._state = SessionState.CLOSED
        logger.info(f"Session {handle.session_id} released")


__all__ = [
    "BackendFactory",
    "SessionManager",
    "SessionState",
]
