"""
Tests for hook configuration loading.

Covers locating .bv/hooks.yaml, YAML parsing, normalization (defaults,
dropped entries, warnings) and rejection of malformed configuration.
"""

import pytest

from bv.core.hooks.exceptions import HookConfigError
from bv.core.hooks.loader import (
    HookLoader,
    get_hooks_config_path,
    load_hooks_config,
    parse_duration,
)
from bv.core.hooks.models import MAX_TIMEOUT_SECONDS, OnError, Phase

# ==============================================================================
# Duration Parsing
# ==============================================================================


class TestParseDuration:
    """Test timeout value parsing."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("5s", 5.0),
            ("100ms", 0.1),
            ("2m", 120.0),
            ("1m30s", 90.0),
            ("1.5h", 5400.0),
            ("250us", 0.00025),
            (" 10s ", 10.0),
            ("7", 7.0),
            (3, 3.0),
            (0.5, 0.5),
        ],
    )
    def test_valid(self, value, expected):
        assert parse_duration(value) == pytest.approx(expected)

    @pytest.mark.parametrize("value", ["", "five seconds", "5x", "s", "10s garbage", "inf", True])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_duration(value)


# ==============================================================================
# Loader
# ==============================================================================


class TestHookLoader:
    """Test loading .bv/hooks.yaml."""

    def test_config_path(self, project_dir):
        assert get_hooks_config_path(project_dir) == project_dir / ".bv" / "hooks.yaml"

    def test_no_config(self, project_dir):
        """Test a missing config file is not an error and yields no hooks."""
        loader = HookLoader(project_dir=project_dir)
        config = loader.load()

        assert not loader.has_hooks()
        assert not config.has_hooks()
        assert loader.get_hooks(Phase.PRE_EXPORT) == []
        assert loader.warnings == []

    def test_empty_file(self, project_dir, write_hooks_config):
        write_hooks_config("")
        loader = HookLoader(project_dir=project_dir)
        loader.load()
        assert not loader.has_hooks()

    def test_valid_config(self, project_dir, write_hooks_config):
        write_hooks_config(
            """
hooks:
  pre-export:
    - name: validate
      command: echo "validating"
      timeout: 5s
  post-export:
    - name: notify
      command: echo "done"
      timeout: 10s
      env:
        CUSTOM_VAR: custom_value
"""
        )
        loader = HookLoader(project_dir=project_dir)
        loader.load()

        assert loader.has_hooks()

        pre_hooks = loader.get_hooks(Phase.PRE_EXPORT)
        assert len(pre_hooks) == 1
        assert pre_hooks[0].name == "validate"
        assert pre_hooks[0].command == 'echo "validating"'
        assert pre_hooks[0].timeout_seconds == 5.0
        assert pre_hooks[0].on_error is OnError.FAIL

        post_hooks = loader.get_hooks(Phase.POST_EXPORT)
        assert len(post_hooks) == 1
        assert post_hooks[0].name == "notify"
        assert post_hooks[0].timeout_seconds == 10.0
        assert post_hooks[0].on_error is OnError.CONTINUE
        assert post_hooks[0].env == {"CUSTOM_VAR": "custom_value"}

    def test_defaults_filled(self, project_dir, write_hooks_config):
        """Test unset timeout and on_error get defaults."""
        write_hooks_config(
            """
hooks:
  pre-export:
    - command: make check
  post-export:
    - command: ./notify.sh
"""
        )
        loader = load_hooks_config(project_dir)

        pre = loader.get_hooks(Phase.PRE_EXPORT)[0]
        post = loader.get_hooks(Phase.POST_EXPORT)[0]
        assert pre.timeout_seconds == 30.0
        assert pre.on_error is OnError.FAIL
        assert pre.name == ""
        assert post.on_error is OnError.CONTINUE

    def test_explicit_on_error_overrides_phase_default(self, project_dir, write_hooks_config):
        write_hooks_config(
            """
hooks:
  pre-export:
    - command: lint
      on_error: continue
  post-export:
    - command: upload
      on_error: FAIL
"""
        )
        loader = load_hooks_config(project_dir)

        assert loader.get_hooks(Phase.PRE_EXPORT)[0].on_error is OnError.CONTINUE
        assert loader.get_hooks(Phase.POST_EXPORT)[0].on_error is OnError.FAIL

    def test_order_preserved(self, project_dir, write_hooks_config):
        write_hooks_config(
            """
hooks:
  post-export:
    - name: first
      command: echo 1
    - name: second
      command: echo 2
    - name: third
      command: echo 3
"""
        )
        loader = load_hooks_config(project_dir)
        names = [h.name for h in loader.get_hooks(Phase.POST_EXPORT)]
        assert names == ["first", "second", "third"]

    def test_command_trimmed(self, project_dir, write_hooks_config):
        write_hooks_config(
            """
hooks:
  pre-export:
    - command: "   echo hi   "
"""
        )
        loader = load_hooks_config(project_dir)
        assert loader.get_hooks(Phase.PRE_EXPORT)[0].command == "echo hi"

    def test_skips_empty_commands(self, project_dir, write_hooks_config):
        """Test empty and whitespace-only commands are dropped with warnings."""
        write_hooks_config(
            """
hooks:
  pre-export:
    - name: empty
      command: ""
  post-export:
    - command: "   "
"""
        )
        loader = HookLoader(project_dir=project_dir)
        loader.load()

        assert not loader.has_hooks()
        warnings = loader.warnings
        assert len(warnings) == 2
        assert "empty" in warnings[0]
        assert "pre-export" in warnings[0]
        assert "#1" in warnings[1]
        assert "post-export" in warnings[1]

    def test_missing_command_dropped(self, project_dir, write_hooks_config):
        write_hooks_config(
            """
hooks:
  pre-export:
    - name: nothing
    - name: real
      command: echo real
"""
        )
        loader = load_hooks_config(project_dir)

        hooks = loader.get_hooks(Phase.PRE_EXPORT)
        assert [h.name for h in hooks] == ["real"]
        assert len(loader.warnings) == 1

    def test_unknown_phase_warns(self, project_dir, write_hooks_config):
        write_hooks_config(
            """
hooks:
  on-export:
    - command: echo never
  pre-export:
    - command: echo ok
"""
        )
        loader = load_hooks_config(project_dir)

        assert len(loader.get_hooks(Phase.PRE_EXPORT)) == 1
        assert any("on-export" in w for w in loader.warnings)

    def test_env_scalars_stringified(self, project_dir, write_hooks_config):
        write_hooks_config(
            """
hooks:
  post-export:
    - command: ./notify.sh
      env:
        PORT: 8080
        VERBOSE: true
        EMPTY:
"""
        )
        loader = load_hooks_config(project_dir)
        env = loader.get_hooks(Phase.POST_EXPORT)[0].env
        assert env == {"PORT": "8080", "VERBOSE": "true", "EMPTY": ""}

    def test_numeric_timeout_is_seconds(self, project_dir, write_hooks_config):
        write_hooks_config(
            """
hooks:
  pre-export:
    - command: sleep 1
      timeout: 2
"""
        )
        loader = load_hooks_config(project_dir)
        assert loader.get_hooks(Phase.PRE_EXPORT)[0].timeout_seconds == 2.0

    def test_explicit_config_path(self, tmp_path, project_dir):
        custom = tmp_path / "custom-hooks.yaml"
        custom.write_text("hooks:\n  pre-export:\n    - command: echo custom\n")

        loader = HookLoader(project_dir=project_dir, config_path=custom)
        loader.load()

        assert loader.get_hooks(Phase.PRE_EXPORT)[0].command == "echo custom"

    def test_hooks_key_absent(self, project_dir, write_hooks_config):
        write_hooks_config("other: value\n")
        loader = load_hooks_config(project_dir)
        assert not loader.has_hooks()

    def test_reload_resets_warnings(self, project_dir, write_hooks_config):
        path = write_hooks_config("hooks:\n  pre-export:\n    - command: ''\n")
        loader = HookLoader(project_dir=project_dir)
        loader.load()
        assert loader.warnings

        path.write_text("hooks:\n  pre-export:\n    - command: echo ok\n")
        loader.load()
        assert loader.warnings == []
        assert loader.has_hooks()


class TestHookLoaderErrors:
    """Test malformed configuration is rejected."""

    def test_invalid_yaml(self, project_dir, write_hooks_config):
        write_hooks_config(
            """
hooks:
  pre-export:
    - name: [invalid yaml
"""
        )
        loader = HookLoader(project_dir=project_dir)

        with pytest.raises(HookConfigError) as exc_info:
            loader.load()

        assert exc_info.value.path == project_dir / ".bv" / "hooks.yaml"
        assert not loader.has_hooks()

    def test_failed_reload_drops_previous_config(self, project_dir, write_hooks_config):
        """Test a failed load keeps no partial or stale configuration."""
        path = write_hooks_config("hooks:\n  pre-export:\n    - command: echo ok\n")
        loader = HookLoader(project_dir=project_dir)
        loader.load()
        assert loader.has_hooks()

        path.write_text("hooks: [\n")
        with pytest.raises(HookConfigError):
            loader.load()
        assert not loader.has_hooks()

    @pytest.mark.parametrize(
        "content",
        [
            "- just\n- a list\n",
            "hooks: [1, 2]\n",
            "hooks:\n  pre-export: notalist\n",
            "hooks:\n  pre-export:\n    - plain string entry\n",
        ],
    )
    def test_wrong_shape(self, project_dir, write_hooks_config, content):
        write_hooks_config(content)
        with pytest.raises(HookConfigError):
            load_hooks_config(project_dir)

    def test_invalid_on_error(self, project_dir, write_hooks_config):
        write_hooks_config(
            """
hooks:
  pre-export:
    - name: check
      command: echo hi
      on_error: ignore
"""
        )
        with pytest.raises(HookConfigError, match="on_error"):
            load_hooks_config(project_dir)

    @pytest.mark.parametrize("timeout", ["soon", "0s", "-5", "1000h", "168h1s"])
    def test_invalid_timeout(self, project_dir, write_hooks_config, timeout):
        write_hooks_config(
            f"""
hooks:
  post-export:
    - name: notify
      command: echo hi
      timeout: "{timeout}"
"""
        )
        with pytest.raises(HookConfigError, match="notify"):
            load_hooks_config(project_dir)

    def test_longest_timeout_accepted(self, project_dir, write_hooks_config):
        write_hooks_config(
            """
hooks:
  post-export:
    - name: nightly
      command: echo hi
      timeout: 168h
"""
        )
        loader = load_hooks_config(project_dir)
        assert loader.config.post_export[0].timeout_seconds == MAX_TIMEOUT_SECONDS
