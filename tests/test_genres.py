from tvheadend_livetv.utils.genres import GenreCategory, categorize, describe, describe_all


def test_describe_known_codes():
    assert describe(16) == "Movie/Drama"
    assert describe(33) == "News/Weather Report"
    assert describe(168) == "Community"


def test_describe_unknown_code():
    assert describe(999) == "Unknown (999)"
    assert describe(-1) == "Unknown (-1)"


def test_describe_all_keeps_order_and_handles_none():
    assert describe_all([32, 16]) == ["News/Current Affairs", "Movie/Drama"]
    assert describe_all([]) == []
    assert describe_all(None) == []


def test_categorize_ranges():
    assert categorize([16]) == {GenreCategory.MOVIE}
    assert categorize([24]) == {GenreCategory.MOVIE}
    assert categorize([25]) == frozenset()
    assert categorize([36]) == {GenreCategory.NEWS}
    assert categorize([51]) == {GenreCategory.SERIES}
    assert categorize([75]) == {GenreCategory.SPORTS}
    assert categorize([83]) == {GenreCategory.KIDS}
    assert categorize([84]) == frozenset()


def test_categorize_multiple_codes():
    assert categorize([16, 64, 999]) == {GenreCategory.MOVIE, GenreCategory.SPORTS}
    assert categorize(None) == frozenset()
