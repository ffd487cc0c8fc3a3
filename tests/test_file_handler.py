import bz2
import gzip
import io
import lzma
import tarfile
import zipfile

import pytest

from logrt.file_handler import (
    ExtractionError,
    FileType,
    identify_file_type,
    process_item,
)


def _zip_bytes(entries, dirs=()):
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for name in dirs:
            archive.writestr(name, b"")
        for name, payload in entries:
            archive.writestr(name, payload)
    return buffer.getvalue()


def _tar_bytes(entries, dirs=()):
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w", format=tarfile.USTAR_FORMAT) as archive:
        for name in dirs:
            info = tarfile.TarInfo(name)
            info.type = tarfile.DIRTYPE
            archive.addfile(info)
        for name, payload in entries:
            info = tarfile.TarInfo(name)
            info.size = len(payload)
            archive.addfile(info, io.BytesIO(payload))
    return buffer.getvalue()


@pytest.mark.parametrize(
    "data, expected",
    [
        (b"\x37\x7a\xbc\xaf\x27\x1c\x00\x04", FileType.SEVEN_Z),
        (lzma.compress(b"hello", format=lzma.FORMAT_XZ), FileType.XZ),
        (bz2.compress(b"hello"), FileType.BZIP2),
        (gzip.compress(b"hello"), FileType.GZIP),
        (_zip_bytes([("a.txt", b"x")]), FileType.ZIP),
        (_tar_bytes([("a.txt", b"x")]), FileType.TAR),
        (b'<?xml version="1.0"?><root/>', FileType.PLAIN_TEXT),
        (b"  <html><body>hi</body></html>", FileType.PLAIN_TEXT),
    ],
)
def test_identify_by_magic_ignores_name(data, expected):
    assert identify_file_type(data, "noname.bin") is expected


@pytest.mark.parametrize(
    "name, expected",
    [
        ("a.7z", FileType.SEVEN_Z),
        ("a.XZ", FileType.XZ),
        ("a.bz2", FileType.BZIP2),
        ("a.tgz", FileType.GZIP),
        ("a.gz", FileType.GZIP),
        ("a.tar", FileType.TAR),
        ("a.zip", FileType.ZIP),
        ("Cargo.toml", FileType.PLAIN_TEXT),
        ("notes.MD", FileType.PLAIN_TEXT),
        ("app.log", FileType.PLAIN_TEXT),
        ("data.bin", FileType.UNKNOWN),
    ],
)
def test_identify_falls_back_to_name(name, expected):
    assert identify_file_type(b"plain words without magic", name) is expected


def test_identify_empty_uses_case_sensitive_suffix():
    assert identify_file_type(b"", "empty.log") is FileType.PLAIN_TEXT
    assert identify_file_type(b"", "empty.LOG") is FileType.UNKNOWN
    assert identify_file_type(b"", "empty.json") is FileType.UNKNOWN


def test_identify_from_path(tmp_path):
    target = tmp_path / "archive.data"
    target.write_bytes(gzip.compress(b"line"))
    assert identify_file_type(target, target.name) is FileType.GZIP


def test_identify_missing_path_raises(tmp_path):
    with pytest.raises(ExtractionError):
        identify_file_type(tmp_path / "missing.txt", "missing.txt")


def test_plain_text_collected():
    assert process_item(b"first\nsecond", "a.txt") == ["first\nsecond"]


def test_appends_to_given_list():
    contents = ["existing"]
    result = process_item(b"more", "b.log", contents)
    assert result is contents
    assert contents == ["existing", "more"]


def test_path_source(tmp_path):
    target = tmp_path / "server.log"
    target.write_text("boot ok\n", encoding="utf-8")
    assert process_item(target, target.name) == ["boot ok\n"]


def test_zip_entries_and_directories_skipped():
    data = _zip_bytes([("logs/a.txt", b"alpha"), ("logs/b.log", b"beta")], dirs=["logs/"])
    seen = []
    contents = process_item(data, "bundle.zip", notify=seen.append)
    assert contents == ["alpha", "beta"]
    assert seen == ["bundle.zip", "logs/a.txt", "logs/b.log"]


def test_tar_regular_files_only():
    data = _tar_bytes([("dir/one.txt", b"one"), ("dir/two.txt", b"two")], dirs=["dir"])
    assert process_item(data, "pack.tar") == ["one", "two"]


def test_tar_gz_naming_and_nesting():
    inner = _tar_bytes([("inner.txt", b"payload")])
    seen = []
    contents = process_item(gzip.compress(inner), "logs.tar.gz", notify=seen.append)
    assert contents == ["payload"]
    assert seen == ["logs.tar.gz", "logs.tar", "inner.txt"]


def test_xz_and_bzip2_strip_suffix():
    seen = []
    xz_data = lzma.compress(b"from xz", format=lzma.FORMAT_XZ)
    bz_data = bz2.compress(b"from bz2")
    contents = process_item(xz_data, "a.log.xz", notify=seen.append)
    process_item(bz_data, "b.log.bz2", contents, notify=seen.append)
    assert contents == ["from xz", "from bz2"]
    assert seen == ["a.log.xz", "a.log", "b.log.bz2", "b.log"]


def test_zip_inside_zip():
    inner = _zip_bytes([("deep.txt", b"deep text")])
    outer = _zip_bytes([("inner.zip", inner), ("top.txt", b"top text")])
    assert process_item(outer, "outer.zip") == ["deep text", "top text"]


def test_depth_limit():
    assert process_item(b"hello", "a.txt", depth=11) == []
    assert process_item(b"hello", "a.txt", depth=10) == ["hello"]


def test_unknown_binary_skipped_when_long():
    blob = bytes(range(256)) * 2
    assert process_item(blob, "blob.bin") == []


def test_unknown_short_binary_kept():
    contents = process_item(b"\xff\xfe", "tiny.bin")
    assert len(contents) == 1
    assert "\ufffd" in contents[0]


def test_unknown_valid_text_kept():
    text = "word " * 100
    assert process_item(text.encode(), "README") == [text]


def test_corrupt_gzip_raises():
    broken = gzip.compress(b"some content here")[:-12]
    with pytest.raises(ExtractionError, match="Error handling gzip: broken.gz"):
        process_item(broken, "broken.gz")


def test_corrupt_zip_raises():
    with pytest.raises(ExtractionError, match="Error handling zip"):
        process_item(b"not a zip archive at all", "bad.zip")


def test_sevenz_raises():
    with pytest.raises(ExtractionError, match="Error handling 7z"):
        process_item(b"\x37\x7a\xbc\xaf\x27\x1c\x00\x04" + b"\x00" * 24, "pack.7z")


def test_missing_path_raises(tmp_path):
    with pytest.raises(ExtractionError, match="Failed to identify file type"):
        process_item(tmp_path / "gone.log", "gone.log")