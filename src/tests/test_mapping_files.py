from __future__ import annotations

from pathlib import Path

import pytest

from pluginmapper.exceptions import MappingFileError
from pluginmapper.mapping_files import load_mapping_files, mapping_key_for_path


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("/mappings/aws.json", "aws"),
        ("gcp", "gcp"),
        ("archive.tar.gz", "archive.tar"),
        (Path("nested/dir/azure.yaml"), "azure"),
    ],
)
def test_mapping_key_for_path_strips_last_extension(
    path: str | Path, expected: str
) -> None:
    assert mapping_key_for_path(path) == expected


def test_load_mapping_files_keeps_bytes_verbatim(tmp_path: Path) -> None:
    aws = tmp_path / "aws.json"
    gcp = tmp_path / "gcp.bin"
    aws.write_bytes(b'{"resources": {}}\n')
    gcp.write_bytes(b"\x00\xffraw")

    entries = load_mapping_files([str(aws), str(gcp)])

    assert entries == {"aws": b'{"resources": {}}\n', "gcp": b"\x00\xffraw"}


def test_load_mapping_files_later_file_replaces_same_key(tmp_path: Path) -> None:
    (tmp_path / "one").mkdir()
    (tmp_path / "two").mkdir()
    first = tmp_path / "one" / "aws.json"
    second = tmp_path / "two" / "aws.yaml"
    first.write_bytes(b"first")
    second.write_bytes(b"second")

    assert load_mapping_files([str(first), str(second)]) == {"aws": b"second"}


def test_load_mapping_files_reports_unreadable_path(tmp_path: Path) -> None:
    readable = tmp_path / "aws.json"
    readable.write_bytes(b"data")
    missing = tmp_path / "gcp.json"

    with pytest.raises(MappingFileError) as exc_info:
        load_mapping_files([str(readable), str(missing)])

    assert str(missing) in str(exc_info.value)
    assert isinstance(exc_info.value.__cause__, FileNotFoundError)


def test_load_mapping_files_rejects_directories(tmp_path: Path) -> None:
    directory = tmp_path / "aws.json"
    directory.mkdir()

    with pytest.raises(MappingFileError, match="could not read mapping file"):
        load_mapping_files([str(directory)])


def test_load_mapping_files_without_paths() -> None:
    assert load_mapping_files([]) == {}
