"""Tests for torrent listing classification."""
import pytest

from hoardhelper.detection import (
    JUNK_SIZE_THRESHOLD,
    classify,
    count_episode_matches,
    detect_media_type,
    find_matching_subtitle,
    get_base_filename,
    get_file_extension,
    get_files_with_subtitle_info,
    group_subtitles_with_videos,
    is_junk_file,
    is_subtitle_file,
    is_video_file,
    match_subtitles,
    validate_torrent_files,
)
from hoardhelper.models import TorrentFile

from .conftest import MB


def test_tv_season_with_junk(make_file) -> None:
    files = [
        make_file(0, "/Show/Show.S01E01.mkv"),
        make_file(1, "/Show/Show.S01E02.mkv"),
        make_file(2, "/Show/Show.S01E03.mkv"),
        make_file(3, "/Show/readme.txt", size=1024),
    ]
    result = detect_media_type(files)
    assert result.media_type == "tv"
    assert len(result.video_files) == 3
    assert len(result.junk_files) == 1
    assert result.junk_files[0].id == 3


def test_single_movie(make_file) -> None:
    result = detect_media_type([make_file(0, "/Inception (2010)/Inception.2010.1080p.mkv")])
    assert result.media_type == "movie"
    assert [f.id for f in result.video_files] == [0]


@pytest.mark.parametrize("count", [1, 2])
def test_few_episode_matches_are_ambiguous(make_file, count: int) -> None:
    files = [make_file(i, f"/Show/Show.S01E0{i + 1}.mkv") for i in range(count)]
    assert detect_media_type(files).media_type == "ambiguous"


def test_empty_listing() -> None:
    result = detect_media_type([])
    assert result.media_type == "movie"
    assert result.video_files == []
    assert result.subtitle_files == []
    assert result.junk_files == []


def test_small_video_is_junk_only(make_file) -> None:
    sample = make_file(1, "/Movie/Sample/movie-sample.mkv", size=10 * MB)
    files = [make_file(0, "/Movie/Movie.mkv"), sample]
    result = detect_media_type(files)
    assert sample in result.junk_files
    assert sample not in result.video_files


def test_small_episode_samples_do_not_count(make_file) -> None:
    files = [make_file(i, f"/Show/Show.S01E0{i + 1}.mkv", size=MB) for i in range(3)]
    result = detect_media_type(files)
    assert result.media_type == "movie"
    assert result.video_files == []
    assert len(result.junk_files) == 3


def test_subtitles_are_never_junk(make_file) -> None:
    subtitle = make_file(1, "/Movie/Movie.srt", size=20 * 1024)
    result = detect_media_type([make_file(0, "/Movie/Movie.mkv"), subtitle])
    assert result.subtitle_files == [subtitle]
    assert subtitle not in result.junk_files


def test_junk_threshold_boundary(make_file) -> None:
    assert is_junk_file(make_file(0, "/a.mkv", size=JUNK_SIZE_THRESHOLD - 1))
    assert not is_junk_file(make_file(0, "/a.mkv", size=JUNK_SIZE_THRESHOLD))


@pytest.mark.parametrize("path", ["/a.nfo", "/a.rar", "/a.zip", "/a.7z", "/a.r00", "/A.TXT"])
def test_junk_extensions_regardless_of_size(make_file, path: str) -> None:
    assert is_junk_file(make_file(0, path))


def test_extension_checks_are_case_insensitive(make_file) -> None:
    assert is_video_file(make_file(0, "/Movie.MKV"))
    assert is_subtitle_file(make_file(0, "/Movie.SRT"))
    assert not is_video_file(make_file(0, "/Movie"))


def test_cross_pattern_counts(make_file) -> None:
    files = [make_file(i, f"/Show/Show.1x0{i + 1}.mp4") for i in range(3)]
    assert detect_media_type(files).media_type == "tv"


def test_file_matching_both_patterns_counts_once(make_file) -> None:
    assert count_episode_matches([make_file(0, "/Show.S01E02.1x02.mkv")]) == 1


def test_partition_invariants(make_file) -> None:
    files = [
        make_file(0, "/S/Show.S01E01.mkv"),
        make_file(1, "/S/Show.S01E01.en.srt", size=10),
        make_file(2, "/S/Show.S01E01.idx", size=10),
        make_file(3, "/S/sample.mkv", size=MB),
        make_file(4, "/S/info.nfo", size=10),
        make_file(5, "/S/cover.jpg", size=MB),
        make_file(6, "/S/Show.S01E02.mkv"),
    ]
    result = detect_media_type(files)
    video_ids = {f.id for f in result.video_files}
    junk_ids = {f.id for f in result.junk_files}
    subtitle_ids = {f.id for f in result.subtitle_files}
    assert video_ids.isdisjoint(junk_ids)
    assert subtitle_ids.isdisjoint(junk_ids)
    assert video_ids == {0, 6}
    assert subtitle_ids == {1, 2}
    assert junk_ids == {3, 4, 5}


def test_classify_alias() -> None:
    assert classify is detect_media_type


def test_helpers() -> None:
    assert get_file_extension("/a/b/Movie.Name.MKV") == ".mkv"
    assert get_file_extension("/a/b/noext") == ""
    assert get_base_filename("/a/b/Episode01.EN.srt") == "episode01.en"
    assert get_base_filename("/a.dir/noext") == "noext"


def test_group_subtitles_with_videos(make_file) -> None:
    videos = [make_file(1, "/Show/Episode01.mkv"), make_file(2, "/Show/Episode02.mkv")]
    subtitles = [
        make_file(3, "/Show/Subs/Episode01.en.srt", size=10),
        make_file(4, "/Show/Episode01.srt", size=10),
        make_file(5, "/Show/EPISODE02.SRT", size=10),
    ]
    assert group_subtitles_with_videos(videos, subtitles) == {1: [3, 4], 2: [5]}
    assert match_subtitles is group_subtitles_with_videos


def test_video_without_subtitles_maps_to_empty_list(make_file) -> None:
    assert group_subtitles_with_videos([make_file(1, "/Movie.mkv")], []) == {1: []}


def test_find_matching_subtitle(make_file) -> None:
    video = make_file(1, "/Show/Episode01.mkv")
    first = make_file(3, "/Show/Episode01.en.srt", size=10)
    second = make_file(4, "/Show/Episode01.srt", size=10)
    assert find_matching_subtitle(video, [first, second]) is first
    assert find_matching_subtitle(video, [make_file(5, "/Other.srt")]) is None


def test_files_with_subtitle_info(make_file) -> None:
    videos = [make_file(1, "/Show/Episode01.mkv")]
    subtitles = [make_file(3, "/Show/Episode01.en.srt", size=10)]
    [info] = get_files_with_subtitle_info(videos, subtitles)
    assert info.id == 1
    assert info.path == "/Show/Episode01.mkv"
    assert info.selected == 1
    assert info.subtitle_file_ids == [3]


def test_validate_accepts_well_formed_listing(make_file) -> None:
    files = [make_file(0, "/a.mkv"), make_file(1, "/b.srt", size=0)]
    assert validate_torrent_files(files) == files


@pytest.mark.parametrize("file", [
    TorrentFile(id=0, path="relative/a.mkv", bytes=1),
    TorrentFile(id=-1, path="/a.mkv", bytes=1),
    TorrentFile(id=0, path="/a.mkv", bytes=-5),
])
def test_validate_rejects_malformed_entries(file: TorrentFile) -> None:
    with pytest.raises(ValueError):
        validate_torrent_files([file])


def test_from_dict() -> None:
    file = TorrentFile.from_dict({"id": 7, "path": "/x.mkv", "bytes": 42, "selected": 1})
    assert file == TorrentFile(id=7, path="/x.mkv", bytes=42, selected=1)
