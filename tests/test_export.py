from openpyxl import load_workbook

from conftest import make_item
from listdeck.export import export_snapshot_to_xlsx, flatten_record
from listdeck.models import ListSnapshot, ListStatus


def test_flatten_record_uses_dotted_keys():
    flat = flatten_record({
        "title": "Villa",
        "location": {"city": "Mumbai", "coordinates": {"latitude": 19.0}},
        "amenities": ["pool", "gym"],
    })
    assert flat == {
        "title": "Villa",
        "location.city": "Mumbai",
        "location.coordinates.latitude": 19.0,
        "amenities": "pool, gym",
    }


def test_export_snapshot_to_xlsx(tmp_path):
    snapshot = ListSnapshot(
        items=(
            make_item(1, location={"city": "Mumbai"}, price=25_000_000),
            make_item(2, active=False, location={"city": "Delhi"}, price=85_000),
        ),
        page=2,
        total_pages=3,
        total_count=25,
        status=ListStatus.LOADED,
    )

    export_path = export_snapshot_to_xlsx(snapshot, tmp_path / "exports" / "page.xlsx")

    assert export_path.exists()
    workbook = load_workbook(export_path)
    worksheet = workbook.active
    assert worksheet.title == "page-2"
    rows = [[cell.value for cell in row] for row in worksheet.iter_rows()]
    assert rows[0] == ["id", "is_active", "title", "location.city", "price"]
    assert rows[1] == ["p1", True, "Property 1", "Mumbai", 25_000_000]
    assert rows[2] == ["p2", False, "Property 2", "Delhi", 85_000]


def test_export_with_explicit_columns(tmp_path):
    snapshot = ListSnapshot(items=(make_item(1, views=45),), status=ListStatus.LOADED)

    export_path = export_snapshot_to_xlsx(snapshot, tmp_path / "views.xlsx", columns=["views", "missing"])

    worksheet = load_workbook(export_path).active
    rows = [[cell.value for cell in row] for row in worksheet.iter_rows()]
    assert rows == [["id", "is_active", "views", "missing"], ["p1", True, 45, None]]
