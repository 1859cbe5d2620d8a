"""Bundle staging tests - assets and pdxinfo must match the declarations."""

from __future__ import annotations

import pytest

from crank.config import Metadata, TargetSpec
from crank.errors import FilesystemError
from crank.packaging import BundleAssembler, StagingBundle


@pytest.fixture
def assembler(project_dir):
    return BundleAssembler(project_dir)


@pytest.fixture
def bundle(project_dir, assembler):
    return assembler.create(StagingBundle(project_dir / "target", "Hello World"))


class TestStagingBundle:
    def test_paths_follow_title(self, tmp_path):
        bundle = StagingBundle(tmp_path, "Hello World")
        assert bundle.root == tmp_path / "Hello World"
        assert bundle.pdx_path == tmp_path / "Hello World.pdx"
        assert bundle.archive_path == tmp_path / "Hello World.pdx.zip"

    def test_create_is_idempotent(self, assembler, bundle):
        """Creating an existing staging directory is not an error."""
        (bundle.root / "keep.txt").write_text("x")
        assembler.create(bundle)
        assert (bundle.root / "keep.txt").exists()


class TestAssetCopy:
    """Assets land at their declared relative paths, byte for byte."""

    def test_asset_fidelity(self, project_dir, assembler, bundle):
        spec = TargetSpec(assets=["images/a.png"])
        assert assembler.copy_assets(bundle, spec) == 1

        copied = bundle.root / "images" / "a.png"
        assert copied.is_file()
        assert copied.read_bytes() == (project_dir / "images" / "a.png").read_bytes()

    def test_nested_directories_created(self, project_dir, assembler, bundle):
        nested = project_dir / "assets" / "levels" / "one"
        nested.mkdir(parents=True)
        (nested / "map.json").write_text("{}")

        assembler.copy_assets(bundle, TargetSpec(assets=["assets/levels/one/map.json"]))
        assert (bundle.root / "assets" / "levels" / "one" / "map.json").read_text() == "{}"

    def test_missing_asset_names_asset(self, assembler, bundle):
        with pytest.raises(FilesystemError, match="sounds/missing.wav"):
            assembler.copy_assets(bundle, TargetSpec(assets=["sounds/missing.wav"]))

    def test_no_spec_copies_nothing(self, assembler, bundle):
        assert assembler.copy_assets(bundle, None) == 0


class TestMetadataFile:
    """pdxinfo lines appear only for set fields, in fixed order."""

    def test_two_fields_two_lines(self, assembler, bundle):
        path = assembler.write_metadata(bundle, Metadata(version="1.0", name="Foo"))
        assert path.read_text().splitlines() == ["name=Foo", "version=1.0"]

    def test_all_fields(self, assembler, bundle):
        metadata = Metadata(
            name="Foo",
            author="Ann",
            description="A game",
            bundle_id="com.example.foo",
            version="1.2",
            build_number=9,
            image_path="images/card",
            launch_sound_path="sounds/launch",
        )
        lines = assembler.write_metadata(bundle, metadata).read_text().splitlines()
        assert [line.split("=", 1)[0] for line in lines] == [
            "name", "author", "description", "bundleID",
            "version", "buildNumber", "imagePath", "launchSoundPath",
        ]
        assert "" not in lines

    def test_no_metadata_no_file(self, assembler, bundle):
        assert assembler.write_metadata(bundle, None) is None
        assert not bundle.pdxinfo.exists()


class TestPackageReplacement:
    def test_remove_existing_package(self, assembler, bundle):
        bundle.pdx_path.mkdir()
        (bundle.pdx_path / "stale").write_text("old")
        assembler.remove_package(bundle)
        assert not bundle.pdx_path.exists()

    def test_remove_missing_package_is_noop(self, assembler, bundle):
        assembler.remove_package(bundle)
        assert not bundle.pdx_path.exists()
