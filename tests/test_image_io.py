"""Tests for image decoding, encoding and export path selection."""

from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image

from mosaic_editor import image_io
from mosaic_editor.errors import (
    DecodeError,
    DestinationExistsError,
    EncodeError,
    FilesystemError,
    MosaicEditorError,
    SaveError,
)
from mosaic_editor.image_io import (
    export_path,
    open_image,
    output_format,
    save_image,
    to_display_bytes,
    unique_path,
)

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


class TestErrors:
    def test_hierarchy(self) -> None:
        assert issubclass(DecodeError, MosaicEditorError)
        assert issubclass(EncodeError, SaveError)
        assert issubclass(FilesystemError, SaveError)
        assert issubclass(DestinationExistsError, FilesystemError)
        assert issubclass(SaveError, MosaicEditorError)
        assert not issubclass(DecodeError, SaveError)


# -- Opening -----------------------------------------------------------


class TestOpenImage:
    def test_png(self, tmp_path: Path, gradient: Image.Image) -> None:
        src = tmp_path / "a.png"
        gradient.save(src)
        img = open_image(src)
        assert img.size == (40, 30)
        assert img.mode == "RGB"
        assert img.tobytes() == gradient.tobytes()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(DecodeError):
            open_image(tmp_path / "missing.png")

    def test_garbage_file(self, tmp_path: Path) -> None:
        bad = tmp_path / "bad.png"
        bad.write_bytes(b"this is not an image")
        with pytest.raises(DecodeError):
            open_image(bad)

    def test_truncated_file(self, tmp_path: Path, gradient: Image.Image) -> None:
        src = tmp_path / "cut.png"
        gradient.save(src)
        src.write_bytes(src.read_bytes()[:60])
        with pytest.raises(DecodeError):
            open_image(src)

    def test_palette_converted_to_rgba(self, tmp_path: Path, gradient: Image.Image) -> None:
        src = tmp_path / "p.png"
        gradient.convert("P").save(src)
        assert open_image(src).mode == "RGBA"

    @pytest.mark.parametrize("mode", ["L", "LA", "RGBA"])
    def test_editable_modes_kept(self, tmp_path: Path, mode: str) -> None:
        src = tmp_path / "m.png"
        Image.new(mode, (4, 4)).save(src)
        assert open_image(src).mode == mode

    def test_psd_uses_composite(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        rendered = Image.new("RGBA", (7, 5), (1, 2, 3, 255))

        class FakePSD:
            @staticmethod
            def open(path):
                return FakePSD()

            def composite(self):
                return rendered

        monkeypatch.setattr(image_io, "PSDImage", FakePSD)
        src = tmp_path / "layers.psd"
        src.write_bytes(b"8BPS")
        img = open_image(src)
        assert img.size == (7, 5)
        assert img.getpixel((0, 0)) == (1, 2, 3, 255)

    def test_psd_without_composite(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        class EmptyPSD:
            @staticmethod
            def open(path):
                return EmptyPSD()

            def composite(self):
                return None

        monkeypatch.setattr(image_io, "PSDImage", EmptyPSD)
        src = tmp_path / "empty.psd"
        src.write_bytes(b"8BPS")
        with pytest.raises(DecodeError):
            open_image(src)


# -- Saving ------------------------------------------------------------


class TestSaveImage:
    @pytest.mark.parametrize(
        ("name", "fmt"),
        [("a.png", "PNG"), ("a.JPG", "JPEG"), ("a.jpeg", "JPEG"), ("a.bmp", "BMP"), ("a.tif", "TIFF")],
    )
    def test_output_format(self, name: str, fmt: str) -> None:
        assert output_format(Path(name)) == fmt

    @pytest.mark.parametrize("name", ["a.xyz", "a", "a.psd"])
    def test_output_format_unknown(self, name: str) -> None:
        with pytest.raises(EncodeError):
            output_format(Path(name))

    def test_png_lossless(self, tmp_path: Path, gradient: Image.Image) -> None:
        out = tmp_path / "out.png"
        save_image(gradient, out)
        with Image.open(out) as saved:
            assert saved.format == "PNG"
            assert saved.tobytes() == gradient.tobytes()

    def test_rgba_to_jpeg_flattened(self, tmp_path: Path) -> None:
        out = tmp_path / "out.jpg"
        save_image(Image.new("RGBA", (8, 8), (10, 20, 30, 100)), out)
        with Image.open(out) as saved:
            assert saved.format == "JPEG"
            assert saved.mode == "RGB"

    def test_unknown_extension_writes_nothing(self, tmp_path: Path, gradient: Image.Image) -> None:
        out = tmp_path / "out.xyz"
        with pytest.raises(EncodeError):
            save_image(gradient, out)
        assert not out.exists()

    def test_existing_destination_never_overwritten(self, tmp_path: Path, gradient: Image.Image) -> None:
        out = tmp_path / "out.png"
        out.write_bytes(b"keep me")
        with pytest.raises(DestinationExistsError):
            save_image(gradient, out)
        assert out.read_bytes() == b"keep me"

    def test_missing_folder(self, tmp_path: Path, gradient: Image.Image) -> None:
        with pytest.raises(FilesystemError):
            save_image(gradient, tmp_path / "no" / "such" / "dir" / "out.png")

    def test_save_errors_catchable_as_save_error(self, tmp_path: Path, gradient: Image.Image) -> None:
        with pytest.raises(SaveError):
            save_image(gradient, tmp_path / "missing" / "out.png")


# -- Export paths ------------------------------------------------------


class TestExportPath:
    def test_free_name_used(self, tmp_path: Path) -> None:
        assert export_path(tmp_path, "photo.jpg") == tmp_path / "photo.jpg"

    def test_collision_prefixed(self, tmp_path: Path) -> None:
        (tmp_path / "photo.jpg").touch()
        assert export_path(tmp_path, "photo.jpg") == tmp_path / "mosaic_photo.jpg"

    def test_double_collision_numbered(self, tmp_path: Path) -> None:
        (tmp_path / "photo.jpg").touch()
        (tmp_path / "mosaic_photo.jpg").touch()
        (tmp_path / "mosaic_photo-01.jpg").touch()
        assert export_path(tmp_path, "photo.jpg") == tmp_path / "mosaic_photo-02.jpg"

    def test_psd_saved_as_png(self, tmp_path: Path) -> None:
        assert export_path(tmp_path, "art.psd") == tmp_path / "art.png"

    def test_directory_part_of_name_ignored(self, tmp_path: Path) -> None:
        assert export_path(tmp_path, "/elsewhere/photo.png") == tmp_path / "photo.png"

    def test_unique_path(self, tmp_path: Path) -> None:
        target = tmp_path / "x.png"
        assert unique_path(target) == target
        target.touch()
        assert unique_path(target) == tmp_path / "x-01.png"


# -- Display bytes -----------------------------------------------------


class TestDisplayBytes:
    def test_png_encoded(self, gradient: Image.Image) -> None:
        data = to_display_bytes(gradient)
        assert data.startswith(PNG_SIGNATURE)

    def test_unencodable(self, gradient: Image.Image) -> None:
        with pytest.raises(EncodeError):
            to_display_bytes(gradient, fmt="NOT-A-FORMAT")
