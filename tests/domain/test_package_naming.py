from upm_git.domain.naming import package_directory_name, validate_package_name


def test_directory_name_replaces_separators_and_dots():
    assert package_directory_name("com.foo.bar") == "com_foo_bar"
    assert package_directory_name("org/pkg\\sub.name") == "org_pkg_sub_name"
    assert package_directory_name("plain") == "plain"


def test_directory_name_is_stable():
    assert package_directory_name("com.foo.bar") == package_directory_name("com.foo.bar")


def test_validate_package_name():
    assert validate_package_name("com.foo.bar") == []
    assert validate_package_name("com.unity.textmeshpro") == []
    assert [d.code for d in validate_package_name("")] == ["DESCRIPTOR_INVALID"]
    assert [d.code for d in validate_package_name("MyPackage")] == ["PACKAGE_NAME_UNCONVENTIONAL"]
