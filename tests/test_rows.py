from extract.data_extract import merge_pages
from extract.unified_lines import default_row_tolerance, group_rows, merge_numeric_fragments
from layout.classes import PageRuns


def test_runs_within_tolerance_share_a_row(make_run):
    runs = [
        make_run("B", 200, 101.5),
        make_run("A", 50, 100),
        make_run("C", 400, 99),
        make_run("D", 50, 120),
    ]
    rows = group_rows(runs, tolerance=5)
    assert [r.text for r in rows] == ["A B C", "D"]
    assert [r.index for r in rows] == [0, 1]
    assert rows[0].y_start == 99


def test_rows_are_ordered_top_to_bottom(make_run):
    runs = [make_run("low", 10, 300), make_run("high", 10, 30), make_run("mid", 10, 150)]
    assert [r.text for r in group_rows(runs, tolerance=5)] == ["high", "mid", "low"]


def test_empty_and_blank_runs(make_run):
    assert group_rows([]) == []
    assert group_rows([make_run("   ", 10, 10)]) == []


def test_default_tolerance_is_clamped(make_run):
    runs = [make_run("x", 0, 0)]
    assert 2.0 <= default_row_tolerance(runs) <= 8.0
    assert default_row_tolerance([]) == 5.5


def test_thousands_groups_are_glued(make_run):
    runs = [make_run("78", 700, 10, 10), make_run("615", 712, 10, 15), make_run("440", 729, 10, 15)]
    merged = merge_numeric_fragments(runs, 0.6)
    assert len(merged) == 1
    assert merged[0].text == "78 615 440"
    assert merged[0].x == 700 and merged[0].right == 744


def test_distant_numbers_stay_apart(make_run):
    runs = [make_run("100302", 580, 10, 30), make_run("870", 770, 10, 15)]
    assert [r.text for r in merge_numeric_fragments(runs, 0.6)] == ["100302", "870"]


def test_merge_pages_offsets_later_pages(make_run):
    p1 = PageRuns(1, 600, 800, [make_run("first", 10, 700, page=1)])
    p2 = PageRuns(2, 600, 800, [make_run("second", 10, 20, page=2)])
    merged = merge_pages([p2, p1])
    assert [r.text for r in merged] == ["first", "second"]
    assert merged[1].y == 820
    assert merged[1].page == 2


def test_merge_pages_flips_bottom_origin(make_run):
    page = PageRuns(1, 600, 800, [make_run("top line", 10, 770)], origin="bottom")
    merged = merge_pages([page])
    assert merged[0].y == 800 - 770 - 10
