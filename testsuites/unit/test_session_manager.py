import pytest

from steadyui.framework.errors import SessionClosedError, SessionInitError
from steadyui.framework.session import SessionConfig
from steadyui.framework.session_manager import SessionManager, SessionState

from .fakes import FakeBackend


class RecordingFactory:
    """Backend factory counting constructions."""

    def __init__(self):
        self.built = []
        self.configs = []

    def __call__(self, config):
        backend = FakeBackend()
        self.built.append(backend)
        self.configs.append(config)
        return backend


@pytest.fixture
def factory():
    return RecordingFactory()


@pytest.fixture
def manager(factory):
    return SessionManager(SessionConfig(engine="firefox"), backend_factory=factory)


def test_get_or_create_is_idempotent_while_live(manager, factory):
    first = manager.get_or_create()
    second = manager.get_or_create()

    assert first is second
    assert len(factory.built) == 1
    assert manager.state is SessionState.LIVE


def test_release_then_create_yields_new_handle(manager, factory):
    old = manager.get_or_create()
    manager.release()
    new = manager.get_or_create()

    assert new is not old
    assert new.session_id != old.session_id
    assert len(factory.built) == 2
    assert factory.built[0].closed is True
    assert factory.built[1].closed is False


def test_released_handle_refuses_operations(manager):
    handle = manager.get_or_create()
    manager.release()

    assert handle.closed
    with pytest.raises(SessionClosedError):
        handle.current_url()
    with pytest.raises(SessionClosedError):
        handle.click("#submit")


def test_release_without_live_session_is_noop(manager, factory):
    manager.release()
    assert manager.state is SessionState.UNINITIALIZED

    manager.get_or_create()
    manager.release()
    manager.release()

    assert manager.state is SessionState.CLOSED
    assert manager.handle is None
    assert len(factory.built) == 1


def test_init_failure_leaves_no_handle():
    def broken_factory(config):
        raise RuntimeError("browser executable not found")

    manager = SessionManager(SessionConfig(), backend_factory=broken_factory)

    with pytest.raises(SessionInitError) as exc_info:
        manager.get_or_create()

    assert isinstance(exc_info.value.__cause__, RuntimeError)
    assert manager.handle is None
    assert manager.state is SessionState.UNINITIALIZED


def test_init_error_from_factory_is_not_wrapped():
    original = SessionInitError("unsupported engine")

    def factory(config):
        raise original

    with pytest.raises(SessionInitError) as exc_info:
        SessionManager(SessionConfig(), backend_factory=factory).get_or_create()

    assert exc_info.value is original


def test_init_can_succeed_after_failure():
    calls = []

    def flaky_factory(config):
        calls.append(config)
        if len(calls) == 1:
            raise RuntimeError("port busy")
        return FakeBackend()

    manager = SessionManager(SessionConfig(), backend_factory=flaky_factory)

    with pytest.raises(SessionInitError):
        manager.get_or_create()
    assert manager.get_or_create().closed is False


def test_backend_close_error_still_closes_handle(manager, factory):
    handle = manager.get_or_create()

    def failing_close():
        raise RuntimeError("browser already gone")

    factory.built[0].close = failing_close
    manager.release()

    assert handle.closed
    assert manager.state is SessionState.CLOSED


def test_config_argument_takes_precedence(manager, factory):
    manager.get_or_create(SessionConfig(engine="webkit"))
    assert factory.configs[0].engine == "webkit"


def test_manager_config_used_by_default(manager, factory):
    handle = manager.get_or_create()
    assert handle.config.engine == "firefox"


def test_context_manager_releases(factory):
    with SessionManager(SessionConfig(), backend_factory=factory) as manager:
        handle = manager.get_or_create()

    assert handle.closed
    assert manager.state is SessionState.CLOSED
