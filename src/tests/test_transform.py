import pytest

from depswap.manifest import PackageManifest
from depswap.specifiers import InvalidSpecifierError
from depswap.transform import build_dependency_map, transform_manifest


def manifest(**fields):
    data = {"name": "app", "version": "1.0.0"}
    data.update(fields)
    return PackageManifest(data, "/tmp/app")


def test_filters_pins_and_hoists():
    pkg = manifest(dependencies={"a": "^1.0.0"}, devDependencies={"b": "^2.0.0"})

    result = transform_manifest(pkg, ["a@^1.5.0", "c@^3.0.0"])

    assert result["dependencies"] == {"a": "^1.5.0", "c": "^3.0.0"}
    assert result["devDependencies"] == {}


def test_scripts_are_always_removed():
    pkg = manifest(scripts={"postinstall": "node evil.js"}, dependencies={"a": "1"})
    assert "scripts" not in transform_manifest(pkg, ["a"])
    assert "scripts" not in transform_manifest(manifest(), ["a"])


def test_duplicate_across_collections_kept_in_higher_priority_only():
    pkg = manifest(
        dependencies={"shared": "^1.0.0"},
        devDependencies={"shared": "^1.0.0", "dev-only": "^2.0.0"},
        optionalDependencies={"shared": "^1.0.0", "dev-only": "^2.0.0"},
    )

    result = transform_manifest(pkg, ["shared@^1.2.0", "dev-only"])

    assert result["dependencies"] == {"shared": "^1.2.0"}
    assert result["devDependencies"] == {"dev-only": "*"}
    assert result["optionalDependencies"] == {}


def test_unrequested_and_local_dependencies_are_dropped():
    pkg = manifest(
        dependencies={"sibling": "file:../sibling", "lodash": "^4.0.0"},
        devDependencies={"jest": "^29.0.0"},
    )

    result = transform_manifest(pkg, ["lodash"])

    assert result["dependencies"] == {"lodash": "*"}
    assert result["devDependencies"] == {}


def test_bundled_dependencies_keep_order_of_survivors():
    pkg = manifest(bundledDependencies=["z", "x", "y"], bundleDependencies=["x", "w"])

    result = transform_manifest(pkg, ["y", "x", "w"])

    assert result["bundledDependencies"] == ["x", "y"]
    # "x" was claimed by bundledDependencies already
    assert result["bundleDependencies"] == ["w"]
    assert "dependencies" not in result


def test_bundled_list_loses_names_claimed_by_mapped_collections():
    pkg = manifest(dependencies={"a": "1.0.0"}, bundledDependencies=["a", "b"])

    result = transform_manifest(pkg, ["a", "b"])

    assert result["dependencies"] == {"a": "*"}
    assert result["bundledDependencies"] == ["b"]


def test_leftovers_create_dependencies_when_absent():
    pkg = manifest(devDependencies={"b": "^2.0.0"})

    result = transform_manifest(pkg, ["@scope/new@^3.0.0", "plain"])

    assert result["dependencies"] == {"@scope/new": "^3.0.0", "plain": "*"}


def test_last_duplicate_specifier_wins():
    pkg = manifest(dependencies={"a": "^1.0.0"})
    assert transform_manifest(pkg, ["a@^1.0.0", "a@^2.0.0"])["dependencies"] == {"a": "^2.0.0"}


def test_other_fields_pass_through_and_input_is_untouched():
    data = {
        "name": "app",
        "private": True,
        "workspaces": ["packages/*"],
        "scripts": {"test": "jest"},
        "dependencies": {"a": "^1.0.0", "b": "^1.0.0"},
    }
    pkg = PackageManifest(data, "/tmp/app")

    result = transform_manifest(pkg, ["a"])

    assert result["private"] is True
    assert result["workspaces"] == ["packages/*"]
    assert pkg.dependencies == {"a": "^1.0.0", "b": "^1.0.0"}
    assert pkg.scripts == {"test": "jest"}


@pytest.mark.parametrize(
    "fields, specs",
    [
        ({"dependencies": {"a": "^1.0.0"}, "devDependencies": {"b": "^2.0.0"}}, ["a@^1.5.0", "c"]),
        ({"optionalDependencies": {"x": "1"}, "bundleDependencies": ["x", "y"]}, ["y", "x@2"]),
        ({"scripts": {"prepare": "tsc"}}, ["@s/p@~1.0.0"]),
    ],
)
def test_transform_is_idempotent(fields, specs):
    once = transform_manifest(manifest(**fields), specs)
    twice = transform_manifest(PackageManifest(once, "/tmp/app"), specs)
    assert twice == once


def test_nameless_specifier_is_rejected():
    with pytest.raises(InvalidSpecifierError):
        transform_manifest(manifest(), ["../local-path"])


def test_build_dependency_map_defaults_range():
    assert build_dependency_map(["a", "b@", "c@^1"]) == {"a": "*", "b": "*", "c": "^1"}
