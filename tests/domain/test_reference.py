import pytest

from upm_git.domain.reference import (
    GitUrlReference,
    LocalReference,
    RegistryReference,
    classify_reference,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("file:com_foo_bar", LocalReference("com_foo_bar")),
        ("file:../Shared/pkg", LocalReference("../Shared/pkg")),
        ("https://example.com/foo.git", GitUrlReference("https://example.com/foo.git")),
        ("git+https://x/y.git#2.1.0", GitUrlReference("git+https://x/y.git", "2.1.0")),
        ("git@github.com:org/repo.git", GitUrlReference("git@github.com:org/repo.git")),
        ("https://example.com/pkg#main", GitUrlReference("https://example.com/pkg", "main")),
        ("1.0.0", RegistryReference("1.0.0")),
        ("", RegistryReference("")),
    ],
)
def test_classify_reference(raw, expected):
    assert classify_reference(raw) == expected


def test_local_and_registry_values_round_trip():
    for raw in ("file:com_foo_bar", "3.0.6", "1.0.0-preview.2"):
        ref = classify_reference(raw)
        assert ref.to_manifest_value() == raw
        assert classify_reference(ref.to_manifest_value()) == ref


def test_git_reference_version_defaults_to_latest():
    assert classify_reference("https://example.com/foo.git").version == "latest"
    assert classify_reference("git+https://x/y.git#2.1.0").version == "2.1.0"


def test_kinds():
    assert classify_reference("file:x").kind == "local"
    assert classify_reference("git+ssh://host/x").kind == "git"
    assert classify_reference("2.0.0").kind == "registry"
