"""Tests for environment stores."""

import os

from runtimeconfig.environment import InMemoryEnvironment, ProcessEnvironment


class TestInMemoryEnvironment:
    """Tests for InMemoryEnvironment."""

    def test_get_set_has(self):
        env = InMemoryEnvironment({"A": "1"})

        assert env.has("A")
        assert not env.has("B")
        assert env.get("B") is None
        assert env.get("B", "fallback") == "fallback"

        env.set("B", "2")
        assert env.get("B") == "2"

    def test_keys_are_case_sensitive(self):
        env = InMemoryEnvironment({"Key": "upper"})

        assert env.has("Key")
        assert not env.has("KEY")

    def test_none_value_stored_as_empty_string(self):
        env = InMemoryEnvironment()

        env.set("EMPTY", None)

        assert env.get("EMPTY") == ""

    def test_initial_dict_is_copied(self):
        initial = {"A": "1"}
        env = InMemoryEnvironment(initial)

        env.set("A", "2")

        assert initial == {"A": "1"}
        assert env.as_dict() == {"A": "2"}


class TestProcessEnvironment:
    """Tests for ProcessEnvironment."""

    def test_writes_through_to_os_environ(self, monkeypatch):
        monkeypatch.delenv("RUNTIME_CONFIG_TEST_KEY", raising=False)
        env = ProcessEnvironment()

        env.set("RUNTIME_CONFIG_TEST_KEY", "value")
        try:
            assert os.environ["RUNTIME_CONFIG_TEST_KEY"] == "value"
            assert env.has("RUNTIME_CONFIG_TEST_KEY")
            assert "RUNTIME_CONFIG_TEST_KEY" in env.as_dict()
        finally:
            os.environ.pop("RUNTIME_CONFIG_TEST_KEY", None)
