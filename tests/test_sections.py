from extract.unified_lines import group_rows
from layout.sections import is_denylisted, is_header_row, mark_noise, segment_sections
from templates.bdk import BDK_TEMPLATE


def _sections(page):
    rows = group_rows(page.runs, tolerance=5)
    mark_noise(rows, BDK_TEMPLATE)
    return {s.kind: s for s in segment_sections(rows, BDK_TEMPLATE)}, rows


def test_sections_in_document_order(bdk_page):
    rows = group_rows(bdk_page.runs, tolerance=5)
    mark_noise(rows, BDK_TEMPLATE)
    sections = segment_sections(rows, BDK_TEMPLATE)
    assert [s.kind for s in sections] == ["opening", "deposits", "checks", "facilities", "unpaid"]
    ys = [(s.start_y, s.end_y) for s in sections]
    assert all(a[1] <= b[0] for a, b in zip(ys, ys[1:]))


def test_data_rows_exclude_titles_headers_and_totals(bdk_page):
    by_kind, _ = _sections(bdk_page)
    deposits = by_kind["deposits"]
    assert len(deposits.rows) == 2
    assert deposits.rows[0].text.startswith("24/06/2025 25/06/2025")
    assert deposits.end_row.text == "TOTAL DEPOSIT 4 500 000"
    assert deposits.header_row is not None
    assert len(by_kind["checks"].rows) == 3
    assert by_kind["checks"].end_row.text.startswith("TOTAL (B)")


def test_anchor_row_is_data_for_opening_and_unpaid(bdk_page):
    by_kind, _ = _sections(bdk_page)
    assert by_kind["opening"].rows[0].text.startswith("OPENING BALANCE")
    assert by_kind["unpaid"].rows[0].text.startswith("26/06/2025 100245 IMPAYE")
    # facilities: title excluded, two facilities plus the totals row
    assert len(by_kind["facilities"].rows) == 3


def test_missing_section_is_skipped(bdk_page):
    runs = [r for r in bdk_page.runs if "BANK FACILITY" not in r.text]
    rows = group_rows(runs, tolerance=5)
    mark_noise(rows, BDK_TEMPLATE)
    kinds = [s.kind for s in segment_sections(rows, BDK_TEMPLATE)]
    assert "facilities" not in kinds
    assert "unpaid" in kinds


def test_denylist():
    assert is_denylisted("TOTAL DEPOSIT 4 500 000")
    assert is_denylisted("Page 2 / 3")
    assert is_denylisted("BALANCE AS PER BANK STATEMENT")
    assert not is_denylisted("24/06/2025 VERSEMENT 3 000 000")


def test_header_row_detection(make_run):
    rows = group_rows([make_run("DATE", 50, 10), make_run("DESCRIPTION", 200, 10), make_run("AMOUNT", 750, 10)], tolerance=5)
    assert is_header_row(rows[0])
    rows = group_rows([make_run("24/06/2025", 50, 10), make_run("DESCRIPTION", 200, 10), make_run("AMOUNT", 750, 10)], tolerance=5)
    assert not is_header_row(rows[0])
