"""Manifest parsing tests."""

from __future__ import annotations

import pytest

from crank.config import MANIFEST_FILENAME, Manifest, Metadata, TargetSpec, load_manifest
from crank.errors import ConfigError

MANIFEST_TEXT = """
targets:
  hello_world:
    assets:
      - images/a.png
      - sounds/jump.wav
    metadata:
      name: Hello World
      author: Jane Doe
      bundle_id: com.example.hello
      version: 1.0
      build_number: 7
  bare:
    assets: []
"""


class TestManifestParsing:
    """Declared targets come back exactly as written."""

    def test_round_trip_target(self):
        """Looking up a parsed target returns its declared assets and metadata."""
        manifest = Manifest.from_text(MANIFEST_TEXT)
        spec = manifest.get_target("hello_world")

        assert spec is not None
        assert spec.assets == ["images/a.png", "sounds/jump.wav"]
        assert spec.metadata == Metadata(
            name="Hello World",
            author="Jane Doe",
            bundle_id="com.example.hello",
            version="1.0",
            build_number=7,
        )

    def test_unset_metadata_fields_stay_absent(self):
        spec = Manifest.from_text(MANIFEST_TEXT).get_target("hello_world")
        assert spec.metadata.description is None
        assert spec.metadata.image_path is None
        assert spec.metadata.launch_sound_path is None

    def test_target_without_metadata(self):
        spec = Manifest.from_text(MANIFEST_TEXT).get_target("bare")
        assert spec == TargetSpec(assets=[], metadata=None)

    def test_unknown_target(self):
        assert Manifest.from_text(MANIFEST_TEXT).get_target("missing") is None

    @pytest.mark.parametrize("text", ["", "targets:\n", "# nothing here\n"])
    def test_empty_documents(self, text):
        assert Manifest.from_text(text).targets == {}


class TestManifestErrors:
    """Malformed manifests are configuration errors."""

    def test_invalid_yaml(self):
        with pytest.raises(ConfigError, match="Malformed manifest"):
            Manifest.from_text("targets: [unclosed\n")

    def test_top_level_not_mapping(self):
        with pytest.raises(ConfigError, match="expected a mapping"):
            Manifest.from_text("- a\n- b\n")

    def test_unknown_metadata_key(self):
        text = "targets:\n  t:\n    metadata:\n      colour: red\n"
        with pytest.raises(ConfigError, match="Invalid manifest"):
            Manifest.from_text(text)

    def test_asset_outside_project(self):
        text = "targets:\n  t:\n    assets:\n      - ../secret.txt\n"
        with pytest.raises(ConfigError, match="relative to the project"):
            Manifest.from_text(text)


class TestLoadManifest:
    def test_missing_file_is_empty_manifest(self, tmp_path):
        assert load_manifest(tmp_path) == Manifest()

    def test_loads_from_project_root(self, tmp_path):
        (tmp_path / MANIFEST_FILENAME).write_text(MANIFEST_TEXT)
        manifest = load_manifest(tmp_path)
        assert set(manifest.targets) == {"hello_world", "bare"}


class TestPdxinfoLines:
    def test_fixed_order_and_keys(self):
        metadata = Metadata(
            launch_sound_path="sounds/launch.wav",
            version="2.1",
            name="Game",
            bundle_id="com.example.game",
            build_number=3,
        )
        assert metadata.pdxinfo_lines() == [
            "name=Game",
            "bundleID=com.example.game",
            "version=2.1",
            "buildNumber=3",
            "launchSoundPath=sounds/launch.wav",
        ]


class TestScalarsKeptAsWritten:
    """Unquoted numbers in metadata reach pdxinfo exactly as typed."""

    def test_version_trailing_zero(self):
        text = "targets:\n  g:\n    metadata:\n      version: 1.10\n"
        metadata = Manifest.from_text(text).get_target("g").metadata
        assert metadata.version == "1.10"
        assert metadata.pdxinfo_lines() == ["version=1.10"]

    @pytest.mark.parametrize("field", ["name", "author", "description", "bundle_id", "image_path", "launch_sound_path"])
    def test_numeric_string_fields(self, field):
        text = f"targets:\n  g:\n    metadata:\n      {field}: 2048\n"
        metadata = Manifest.from_text(text).get_target("g").metadata
        assert getattr(metadata, field) == "2048"

    def test_build_number_still_integer(self):
        text = "targets:\n  g:\n    metadata:\n      build_number: 42\n"
        assert Manifest.from_text(text).get_target("g").metadata.build_number == 42

    def test_numeric_target_name(self):
        manifest = Manifest.from_text("targets:\n  2048:\n    assets: []\n")
        assert manifest.get_target("2048") is not None


class TestSingleLineMetadata:
    def test_block_scalar_rejected(self):
        text = "targets:\n  g:\n    metadata:\n      name: Foo\n      description: |\n        line one\n        line two\n"
        with pytest.raises(ConfigError, match="single line"):
            Manifest.from_text(text)

    def test_carriage_return_rejected(self):
        text = 'targets:\n  g:\n    metadata:\n      author: "Ann\\rBob"\n'
        with pytest.raises(ConfigError, match="single line"):
            Manifest.from_text(text)
