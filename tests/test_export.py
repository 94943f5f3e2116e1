import os

from openpyxl import load_workbook

from bustrack.export import export_route_sheet


def test_export_route_sheet(route_factory, tmp_path):
    route = route_factory()
    path = export_route_sheet(route, route.students, folder=str(tmp_path), day="2026-10-18")

    assert path == os.path.join(str(tmp_path), "Morning North", "2026-10-18.xlsx")
    ws = load_workbook(path).active
    assert [c.value for c in ws[1]] == ["No.", "Name", "Group", "Pickup time", "Attendance", "Marked at"]
    rows = [[c.value for c in row] for row in ws.iter_rows(min_row=2)]
    assert [r[1] for r in rows] == ["Ana Diaz", "Ben Ruiz", "Cai Lee"]
    assert rows[0][2] == "3A"
    assert rows[1][4] == "Present"
