"""
Unit tests for folder import.
"""

from pathlib import Path

from burstcull.importer import find_image_files, hash_image_file, import_directory
from burstcull.similarity import PreviewDecoder, hamming_distance


class TestFindImageFiles:
    """Test image discovery."""

    def test_recursive(self, sample_images, temp_dir):
        files = find_image_files(temp_dir)
        names = {Path(f).name for f in files}
        assert names == {"pattern.png", "pattern_half.png", "inverted.png", "deep.jpg", "corrupted.jpg"}

    def test_non_recursive(self, sample_images, temp_dir):
        names = {Path(f).name for f in find_image_files(temp_dir, recursive=False)}
        assert "deep.jpg" not in names
        assert "pattern.png" in names

    def test_sorted_absolute_paths(self, sample_images, temp_dir):
        files = find_image_files(temp_dir)
        assert files == sorted(files)
        assert all(Path(f).is_absolute() for f in files)

    def test_uppercase_extension(self, temp_dir, sample_images):
        upper = temp_dir / "LOUD.PNG"
        upper.write_bytes(Path(sample_images['pattern']).read_bytes())
        assert str(upper.resolve()) in find_image_files(temp_dir)

    def test_empty_directory(self, temp_dir):
        assert find_image_files(temp_dir) == []


class TestHashImageFile:
    """Test single-file hashing."""

    def test_record_fields(self, sample_images):
        record = hash_image_file(sample_images['pattern'], PreviewDecoder())
        assert record.file_name == "pattern.png"
        assert record.preview_ref == sample_images['pattern']
        assert len(record.phash) == 16


class TestImportDirectory:
    """Test importing into the library."""

    def test_import(self, temp_store, sample_images, temp_dir):
        stats = import_directory(temp_store, temp_dir, show_progress=False, max_workers=2)

        assert stats.discovered == 5
        assert stats.imported == 4
        assert stats.failed == 1
        assert any(path.endswith("corrupted.jpg") for path in stats.errors)

        images = temp_store.list_images()
        assert len(images) == 4
        assert [img.file_path for img in images] == sorted(img.file_path for img in images)
        assert all(img.phash and len(img.phash) == 16 for img in images)

    def test_scaled_copies_hash_close(self, temp_store, sample_images, temp_dir):
        import_directory(temp_store, temp_dir, show_progress=False)
        by_name = {img.file_name: img for img in temp_store.list_images()}
        assert hamming_distance(by_name["pattern.png"].phash, by_name["pattern_half.png"].phash) < 15

    def test_reimport_skips_known(self, temp_store, sample_images, temp_dir):
        import_directory(temp_store, temp_dir, show_progress=False)
        stats = import_directory(temp_store, temp_dir, show_progress=False)

        assert stats.already_known == 4
        assert stats.imported == 0
        assert len(temp_store.list_images()) == 4

    def test_progress_callback(self, temp_store, sample_images, temp_dir):
        calls = []
        import_directory(
            temp_store, temp_dir, show_progress=False,
            progress_callback=lambda current, total: calls.append((current, total)),
        )
        assert calls[-1] == (5, 5)
