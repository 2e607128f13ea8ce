from __future__ import annotations

from app.viewmodels.entry_vm import EntryVM, format_duration, format_file_size


def test_format_file_size():
    assert format_file_size(None) == "-"
    assert format_file_size(0) == "-"
    assert format_file_size(512) == "512.0 B"
    assert format_file_size(1536) == "1.5 KB"
    assert format_file_size(3 * 1024**3) == "3.0 GB"


def test_format_duration():
    assert format_duration(None) == "-"
    assert format_duration(59.9) == "0:59"
    assert format_duration(754) == "12:34"
    assert format_duration(3 * 3600 + 5) == "3:00:05"


def test_entry_vm_properties(make_entry, make_tag):
    tags = [make_tag(f"t{i}", color=f"#00000{i}") for i in range(1, 6)]
    entry = make_entry("C:\\movies\\clip.mkv", title=None, tags=tags)
    vm = EntryVM(entry)
    assert vm.display_title == "Untitled"
    assert vm.file_name == "clip.mkv"
    assert vm.tag_colors == ["#000001", "#000002", "#000003"]
    assert vm.extra_tag_count == 2


def test_poster_prefers_external(make_entry):
    entry = make_entry("/v/one.mkv", thumbnail_path="/thumbs/1.jpg")
    assert EntryVM(entry).poster_path == "/thumbs/1.jpg"
    entry.tmdb_poster_path = "/posters/1.jpg"
    assert EntryVM(entry).poster_path == "/posters/1.jpg"


def test_list_row(make_entry, make_tag):
    entry = make_entry(
        "/v/heat.mkv",
        title="Heat",
        year=1995,
        file_size=2048,
        duration=10260,
        tags=[make_tag("crime"), make_tag("drama")],
    )
    assert EntryVM(entry).list_row() == ["Heat", "1995", "2.0 KB", "2:51:00", "crime, drama"]
    assert EntryVM(make_entry("/v/x.mkv")).list_row() == ["Untitled", "", "-", "-", ""]
