"""
Tests for reading back and validating packages.
"""

import json
import zipfile

import pytest

from apkg_writer import Package, PackageValidator


@pytest.fixture
def package_file(tmp_path, make_deck, media_dir, timestamp):
    output = tmp_path / "deck.apkg"
    Package([make_deck(note_count=3)], [media_dir / "img.png"]).write_to_file_timestamp(str(output), timestamp)
    return output


def rewrite_archive(source, target, drop=(), replace=None):
    """Copy an archive, dropping or replacing members."""
    replace = replace or {}
    with zipfile.ZipFile(source) as src, zipfile.ZipFile(target, "w") as dst:
        for name in src.namelist():
            if name in drop:
                continue
            dst.writestr(name, replace.get(name, src.read(name)))


class TestValidatePackage:
    """Test package validation."""

    def test_valid_package(self, package_file):
        assert PackageValidator.validate_package(str(package_file))

    def test_missing_file(self, tmp_path):
        assert not PackageValidator.validate_package(str(tmp_path / "missing.apkg"))

    def test_not_a_zip(self, tmp_path):
        path = tmp_path / "junk.apkg"
        path.write_bytes(b"not a zip archive")
        assert not PackageValidator.validate_package(str(path))

    def test_missing_collection(self, tmp_path, package_file):
        broken = tmp_path / "broken.apkg"
        rewrite_archive(package_file, broken, drop=("collection.anki2",))
        assert not PackageValidator.validate_package(str(broken))

    def test_missing_media_member(self, tmp_path, package_file):
        broken = tmp_path / "broken.apkg"
        rewrite_archive(package_file, broken, drop=("0",))
        assert not PackageValidator.validate_package(str(broken))

    def test_gapped_manifest(self, tmp_path, package_file):
        broken = tmp_path / "broken.apkg"
        rewrite_archive(package_file, broken, replace={"media": json.dumps({"1": "img.png"})})
        assert not PackageValidator.validate_package(str(broken))

    @pytest.mark.parametrize("manifest", ["5", "[]", "\"img.png\"", "null"])
    def test_manifest_not_an_object(self, tmp_path, package_file, manifest):
        """A manifest that parses but is not a JSON object fails validation."""
        broken = tmp_path / "broken.apkg"
        rewrite_archive(package_file, broken, replace={"media": manifest})

        assert not PackageValidator.validate_package(str(broken))
        info = PackageValidator.get_package_info(str(broken))
        assert info['exists']
        assert not info['valid']
        assert info['media'] == {}

    def test_corrupt_collection(self, tmp_path, package_file):
        broken = tmp_path / "broken.apkg"
        rewrite_archive(package_file, broken, replace={"collection.anki2": b"garbage" * 100})
        assert not PackageValidator.validate_package(str(broken))


class TestGetPackageInfo:
    """Test package summaries."""

    def test_info(self, package_file, make_deck):
        info = PackageValidator.get_package_info(str(package_file))

        assert info['exists']
        assert info['valid']
        assert info['size_bytes'] == package_file.stat().st_size
        assert info['members'] == ["collection.anki2", "media", "0"]
        assert info['media'] == {"0": "img.png"}
        assert info['note_count'] == 3
        assert info['card_count'] == 3
        assert info['decks']['2059400110'] == 'Capitals'

    def test_missing(self, tmp_path):
        info = PackageValidator.get_package_info(str(tmp_path / "missing.apkg"))
        assert not info['exists']
        assert not info['valid']
        assert info['size_bytes'] == 0
