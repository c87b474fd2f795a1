"""Client-side session helpers: token storage, the dashboard guard and busy flags."""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterable, MutableMapping, Optional, Union

from errors import BusyError

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"
LOGIN_PATH = "/"

# Session keys owned by the signed-in user
USER_STATE_KEYS = ("registry", "store", "draft", "flash", "expense_errors", "recommendations")


class TokenStore:
    """Keeps the bearer token in a session mapping (``st.session_state`` in the app)."""

    def __init__(self, state: MutableMapping, key: str = TOKEN_KEY):
        self._state = state
        self._key = key

    def get(self) -> Optional[str]:
        return self._state.get(self._key) or None

    def save(self, token: str):
        self._state[self._key] = token

    def clear(self):
        self._state.pop(self._key, None)


@dataclass(frozen=True)
class Allowed:
    pass


@dataclass(frozen=True)
class Redirect:
    path: str = LOGIN_PATH


Decision = Union[Allowed, Redirect]


class SessionGuard:
    """
    Lets the dashboard render only when a token is present.

    The token is looked up once per activation of the protected view; later
    re-renders reuse that decision until ``reset`` starts a new activation.
    Whether the token is still valid is the auth service's business.
    """

    def __init__(self, tokens: TokenStore, login_path: str = LOGIN_PATH):
        self._tokens = tokens
        self._login_path = login_path
        self._decision: Optional[Decision] = None

    def check(self) -> Decision:
        if self._decision is None:
            if self._tokens.get():
                self._decision = Allowed()
            else:
                logger.info("No session token; redirecting to %s", self._login_path)
                self._decision = Redirect(self._login_path)
        return self._decision

    def reset(self):
        self._decision = None


class BusyFlag:
    """
    Marks a network-bound action as in flight.

    The flag lives in the session mapping, so it survives the rerun between a
    button's ``on_click`` (``start``) and the body that performs the call
    (``running``). While it is set the button renders disabled and further
    starts are refused.
    """

    def __init__(self, state: MutableMapping, name: str):
        self._state = state
        self._key = f"busy_{name}"
        self.name = name

    @property
    def is_set(self) -> bool:
        return bool(self._state.get(self._key, False))

    def start(self):
        if self.is_set:
            raise BusyError(self.name)
        self._state[self._key] = True

    def finish(self):
        self._state[self._key] = False

    @contextmanager
    def running(self):
        """Runs a started action; the flag is cleared however it ends."""
        try:
            yield
        finally:
            self.finish()

    @contextmanager
    def hold(self):
        self.start()
        with self.running():
            yield


def end_session(state: MutableMapping, tokens: TokenStore, guard: SessionGuard, keys: Iterable[str] = USER_STATE_KEYS):
    """
    Logs out: drops the token and every per-user object held in ``state``.

    The next sign-in starts from an empty record store and a fresh registry.
    """
    tokens.clear()
    for key in keys:
        state.pop(key, None)
    guard.reset()
    logger.info("Session ended")
