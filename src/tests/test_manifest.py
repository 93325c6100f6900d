import json

import pytest

from depswap.manifest import ManifestError, PackageManifest, write_manifest


def test_load_sets_locations(tmp_path):
    manifest = tmp_path / "pkg" / "package.json"
    manifest.parent.mkdir()
    manifest.write_text(json.dumps({"name": "x", "version": "2.0.0"}))

    pkg = PackageManifest.load(manifest, root_path=tmp_path)

    assert pkg.name == "x"
    assert pkg.version == "2.0.0"
    assert pkg.location == tmp_path / "pkg"
    assert pkg.manifest_location == manifest
    assert pkg.root_path == tmp_path
    assert PackageManifest.load(manifest).root_path == tmp_path / "pkg"


def test_to_json_is_a_deep_copy():
    pkg = PackageManifest({"dependencies": {"a": "1"}}, "/tmp/x")
    doc = pkg.to_json()
    doc["dependencies"]["b"] = "2"
    assert pkg.dependencies == {"a": "1"}


@pytest.mark.parametrize("content, message", [(None, "not found"), ("{oops", "invalid JSON"), ("[]", "JSON object")])
def test_load_errors(tmp_path, content, message):
    manifest = tmp_path / "package.json"
    if content is not None:
        manifest.write_text(content)
    with pytest.raises(ManifestError, match=message):
        PackageManifest.load(manifest)


def test_write_manifest_sorts_dependency_collections_only(tmp_path):
    path = tmp_path / "package.json"
    write_manifest(
        path,
        {
            "name": "x",
            "files": ["z", "a"],
            "dependencies": {"zeta": "1", "alpha": "2"},
            "peerDependencies": {"react": "*", "next": "*"},
        },
    )

    text = path.read_text()
    assert text.endswith("}\n")
    data = json.loads(text)
    assert list(data) == ["name", "files", "dependencies", "peerDependencies"]
    assert list(data["dependencies"]) == ["alpha", "zeta"]
    assert list(data["peerDependencies"]) == ["next", "react"]
    assert data["files"] == ["z", "a"]
    assert '  "name": "x"' in text
