"""
Unit tests for project identities and backup path policy.

Tests cover:
- Identity construction and case folding
- Non-reflexive equality of unknown identities
- Deducing identities from working paths
- Backup path computation and validation
"""

import pytest

from bundle_backup import identity as identities
from bundle_backup.backup_path import default_backup_path, is_proper_backup_path
from bundle_backup.errors import ConfigurationError
from bundle_backup.identity import KnownIdentity, UnknownIdentity


class TestIdentity:
    """Tests for Identity construction and equality."""

    @pytest.mark.parametrize("value", ["demo", "Demo", "MY-Project", "x"])
    def test_create_lowercases(self, value):
        """Non-empty input becomes a known, lower-cased identity."""
        created = identities.create(value)

        assert created.known is True
        assert created == KnownIdentity(value.lower())
        assert str(created) == value.lower()

    @pytest.mark.parametrize("value", ["", None])
    def test_create_empty_is_unknown(self, value):
        """Empty or missing input yields an unknown identity."""
        created = identities.create(value)

        assert isinstance(created, UnknownIdentity)
        assert created.known is False
        assert str(created) == ""

    def test_unknown_never_equal(self):
        """Unknown is not equal to another unknown, nor to itself."""
        first = UnknownIdentity()
        second = UnknownIdentity()

        assert (first == second) is False
        assert (first == first) is False
        assert first != first

    def test_unknown_vs_known(self):
        """Unknown and known never compare equal in either direction."""
        unknown = UnknownIdentity()
        known = KnownIdentity("demo")

        assert (unknown == known) is False
        assert (known == unknown) is False

    def test_known_equality_is_case_insensitive(self):
        """Case folding happens at construction."""
        assert KnownIdentity("Demo") == KnownIdentity("DEMO")
        assert hash(KnownIdentity("Demo")) == hash(KnownIdentity("demo"))
        assert KnownIdentity("demo") != KnownIdentity("other")

    def test_inequality_mirrors_equality(self):
        """!= is always the negation of == for both variants."""
        unknown = UnknownIdentity()

        assert (KnownIdentity("demo") != KnownIdentity("DEMO")) is False
        assert unknown != unknown
        assert unknown != KnownIdentity("demo")
        assert KnownIdentity("demo") != unknown

    def test_known_not_equal_to_plain_string(self):
        """Identities only compare equal to identities."""
        assert (KnownIdentity("demo") == "demo") is False


class TestDeduceFromPath:
    """Tests for identity deduction from working paths."""

    def test_last_component(self):
        """Uses the lower-cased last path component."""
        assert identities.deduce_from_path("/a/b/MyProj") == KnownIdentity("myproj")

    def test_trailing_separator_ignored(self):
        """A trailing slash does not produce an empty name."""
        assert identities.deduce_from_path("/a/b/MyProj/") == KnownIdentity("myproj")

    @pytest.mark.parametrize("path", ["", "/", None])
    def test_degenerate_paths_raise(self, path):
        """Paths without a last component are rejected."""
        with pytest.raises(ConfigurationError, match="Cannot deduce"):
            identities.deduce_from_path(path)


class TestBackupPath:
    """Tests for backup path policy."""

    def test_default_backup_path(self):
        """Bundle lives directly under the root, named after the project."""
        assert (
            default_backup_path("/backups", KnownIdentity("Demo"))
            == "/backups/demo.git.bundle"
        )

    @pytest.mark.parametrize("root", ["", None])
    def test_default_backup_path_requires_root(self, root):
        """Missing root is a configuration error."""
        with pytest.raises(ConfigurationError, match="default_backup_root"):
            default_backup_path(root, KnownIdentity("demo"))

    def test_default_backup_path_requires_known_identity(self):
        """Unknown identities have no backup path."""
        with pytest.raises(ConfigurationError):
            default_backup_path("/backups", UnknownIdentity())

    @pytest.mark.parametrize(
        "path, expected",
        [
            ("x.git.bundle", True),
            ("/mnt/backups/demo.git.bundle", True),
            ("x.bundle", False),
            ("x.git", False),
            ("", False),
            (None, False),
        ],
    )
    def test_is_proper_backup_path(self, path, expected):
        """Only paths ending in .git.bundle are proper."""
        assert is_proper_backup_path(path) is expected
