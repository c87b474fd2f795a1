"""Tests for token storage, the dashboard guard and busy flags."""

import pytest

from errors import BusyError
from categories import CategoryRegistry
from records import RecordStore
from session import USER_STATE_KEYS, Allowed, BusyFlag, Redirect, SessionGuard, TokenStore, end_session


class CountingState(dict):
    """Session mapping that counts token lookups."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.reads = 0

    def get(self, key, default=None):
        self.reads += 1
        return super().get(key, default)


class TestTokenStore:
    def test_save_get_clear(self):
        tokens = TokenStore({})
        assert tokens.get() is None
        tokens.save("abc")
        assert tokens.get() == "abc"
        tokens.clear()
        assert tokens.get() is None

    def test_empty_token_counts_as_missing(self):
        assert TokenStore({"token": ""}).get() is None

    def test_clear_without_token(self):
        TokenStore({}).clear()


class TestSessionGuard:
    def test_redirects_without_token(self):
        assert SessionGuard(TokenStore({})).check() == Redirect("/")

    def test_allows_with_token(self):
        assert SessionGuard(TokenStore({"token": "abc"})).check() == Allowed()

    def test_token_read_once_per_activation(self):
        state = CountingState(token="abc")
        guard = SessionGuard(TokenStore(state))
        for _ in range(5):
            assert isinstance(guard.check(), Allowed)
        assert state.reads == 1

    def test_reset_starts_new_activation(self):
        state = {}
        tokens = TokenStore(state)
        guard = SessionGuard(tokens)
        assert isinstance(guard.check(), Redirect)
        tokens.save("abc")
        # Same activation keeps its decision
        assert isinstance(guard.check(), Redirect)
        guard.reset()
        assert isinstance(guard.check(), Allowed)

    def test_logout_then_reset_redirects(self):
        tokens = TokenStore({"token": "abc"})
        guard = SessionGuard(tokens)
        assert isinstance(guard.check(), Allowed)
        tokens.clear()
        guard.reset()
        assert isinstance(guard.check(), Redirect)

    def test_custom_login_path(self):
        assert SessionGuard(TokenStore({}), login_path="/login").check() == Redirect("/login")


class TestBusyFlag:
    def test_set_while_held(self):
        state = {}
        flag = BusyFlag(state, "categorize")
        assert not flag.is_set
        with flag.hold():
            assert flag.is_set
        assert not flag.is_set

    def test_refuses_reentry(self):
        flag = BusyFlag({}, "register")
        with flag.hold():
            with pytest.raises(BusyError):
                with flag.hold():
                    pass
            assert flag.is_set

    def test_resets_after_failure(self):
        flag = BusyFlag({}, "recommend")
        with pytest.raises(RuntimeError):
            with flag.hold():
                raise RuntimeError("boom")
        assert not flag.is_set

    def test_flags_are_independent(self):
        state = {}
        with BusyFlag(state, "a").hold():
            assert not BusyFlag(state, "b").is_set

    def test_started_flag_survives_until_the_call_runs(self):
        state = {}
        BusyFlag(state, "register").start()
        # Next rerun: a fresh flag object over the same session
        flag = BusyFlag(state, "register")
        assert flag.is_set
        with flag.running():
            assert flag.is_set
        assert not flag.is_set

    def test_start_refused_while_in_flight(self):
        state = {}
        BusyFlag(state, "login").start()
        with pytest.raises(BusyError):
            BusyFlag(state, "login").start()

    def test_running_clears_after_failure(self):
        flag = BusyFlag({}, "categorize")
        flag.start()
        with pytest.raises(RuntimeError):
            with flag.running():
                raise RuntimeError("boom")
        assert not flag.is_set
        flag.start()


class TestEndSession:
    @pytest.fixture
    def signed_in(self, store):
        state = {
            "token": "abc",
            "registry": CategoryRegistry(),
            "store": store,
            "draft": object(),
            "flash": [("success", "hi")],
            "expense_errors": {"name": "too short"},
            "recommendations": object(),
            "draft_name": "Lunch",
            "theme": "dark",
        }
        tokens = TokenStore(state)
        guard = SessionGuard(tokens)
        assert isinstance(guard.check(), Allowed)
        return state, tokens, guard

    def test_drops_token_and_user_objects(self, signed_in):
        state, tokens, guard = signed_in
        end_session(state, tokens, guard)
        assert tokens.get() is None
        for key in USER_STATE_KEYS:
            assert key not in state

    def test_guard_redirects_after_logout(self, signed_in):
        state, tokens, guard = signed_in
        end_session(state, tokens, guard)
        assert isinstance(guard.check(), Redirect)

    def test_extra_keys_dropped_and_others_kept(self, signed_in):
        state, tokens, guard = signed_in
        end_session(state, tokens, guard, USER_STATE_KEYS + ("draft_name",))
        assert "draft_name" not in state
        assert state["theme"] == "dark"

    def test_next_user_starts_with_no_records(self, signed_in):
        state, tokens, guard = signed_in
        assert state["store"].expenses
        end_session(state, tokens, guard)
        state.setdefault("store", RecordStore())
        state.setdefault("registry", CategoryRegistry())
        assert state["store"].expenses == []
        assert state["store"].incomes == []
        assert state["registry"].find_by_label("Food") is not None
        assert len(state["registry"]) == 6
