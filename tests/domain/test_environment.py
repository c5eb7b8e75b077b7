"""Tests for the environment merge service."""

from shellenv.domain.services.environment import merge_environment


class TestMergeEnvironment:
    def test_declared_variable_overrides_inherited(self):
        env = merge_environment({"MESSAGE": "Bye"}, [], {"MESSAGE": "Hello"})
        assert env["MESSAGE"] == "Hello"

    def test_undeclared_variables_pass_through(self):
        env = merge_environment({"HOME": "/home/u", "TERM": "xterm"}, [], {})
        assert env["HOME"] == "/home/u"
        assert env["TERM"] == "xterm"

    def test_path_entries_prepended_in_order(self):
        env = merge_environment(
            {"PATH": "/usr/bin"}, ["/nix/store/a/bin", "/nix/store/b/bin"], {}
        )
        assert env["PATH"] == "/nix/store/a/bin:/nix/store/b/bin:/usr/bin"

    def test_path_created_when_absent(self):
        env = merge_environment({}, ["/nix/store/a/bin"], {})
        assert env["PATH"] == "/nix/store/a/bin"

    def test_unset_removes_inherited(self):
        env = merge_environment({"SOURCE_DATE_EPOCH": "0"}, [], {}, unset=["SOURCE_DATE_EPOCH"])
        assert "SOURCE_DATE_EPOCH" not in env

    def test_unset_of_absent_variable_is_ignored(self):
        assert "X" not in merge_environment({}, [], {}, unset=["X"])

    def test_marks_nix_shell(self):
        env = merge_environment({}, [], {}, name="dev")
        assert env["IN_NIX_SHELL"] == "impure"
        assert env["name"] == "dev"

    def test_declared_path_wins_over_prepend(self):
        env = merge_environment({"PATH": "/usr/bin"}, ["/nix/store/a/bin"], {"PATH": "/only"})
        assert env["PATH"] == "/only"

    def test_inherited_mapping_not_mutated(self):
        inherited = {"PATH": "/usr/bin", "GONE": "1"}
        merge_environment(inherited, ["/x/bin"], {"A": "1"}, unset=["GONE"])
        assert inherited == {"PATH": "/usr/bin", "GONE": "1"}
