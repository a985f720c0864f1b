"""Unit tests for gcp_editor.importer module."""

import itertools
import logging
from pathlib import Path

import pytest

from gcp_editor.errors import EmptyInputError
from gcp_editor.exporter import export_text
from gcp_editor.formats import GcpFormat
from gcp_editor.importer import ImportStatus, import_points, read_gcp_file
from gcp_editor.points import GcpPoint

EXAMPLE_CSV = "1.0,2.0,0,100,200,img1.jpg,PointA\n3.0,4.0,0,150,250,img2.jpg,PointB"


def _counter_ids():
    counter = itertools.count(1)
    return lambda: f"id{next(counter)}"


class TestImportCsv7Field:
    """Tests for the comma-separated 7-field format."""

    def test_example_file(self) -> None:
        """Test the reference two-row file imports into two singleton groups."""
        result = import_points(EXAMPLE_CSV, GcpFormat.CSV_7FIELD)

        assert result.status is ImportStatus.OK
        assert [p.name for p in result.points] == ["PointA", "PointB"]
        assert result.groups.names == ["PointA", "PointB"]
        assert all(len(result.groups[name]) == 1 for name in result.groups)
        first = result.points[0]
        assert first == GcpPoint(
            id="ignored",
            name="PointA",
            x=1.0,
            y=2.0,
            z=0.0,
            pixel_x=100.0,
            pixel_y=200.0,
            image_name="img1.jpg",
        )

    def test_short_rows_dropped(self) -> None:
        """Test rows with fewer than 7 fields are skipped and counted."""
        text = "1,2,0,100,200,img1.jpg,A\n1,2,0,100,200,img2.jpg\n5,6,0,1,1,img3.jpg,B"

        result = import_points(text, GcpFormat.CSV_7FIELD)

        assert [p.name for p in result.points] == ["A", "B"]
        assert result.skipped == 1
        assert result.malformed_rows[0].line_number == 2
        assert "expected 7 fields" in result.malformed_rows[0].reason

    @pytest.mark.parametrize(
        "row",
        ["abc,2,0,1,1,img.jpg,A", "1,,0,1,1,img.jpg,A", "nan,2,0,1,1,img.jpg,A", "1,inf,0,1,1,img.jpg,A"],
        ids=["text-x", "empty-y", "nan-x", "inf-y"],
    )
    def test_bad_required_number_drops_row(self, row: str) -> None:
        """Test a row whose x or y is not a finite number is dropped, not nulled."""
        result = import_points(row, GcpFormat.CSV_7FIELD)

        assert result.points == []
        assert result.status is ImportStatus.NO_VALID_ROWS

    def test_empty_optional_fields(self) -> None:
        """Test empty z/pixel/image fields become defaults instead of failing."""
        result = import_points("1,2,,,,,A", GcpFormat.CSV_7FIELD)

        point = result.points[0]
        assert point.z == 0.0
        assert point.pixel_x is None
        assert point.pixel_y is None
        assert point.image_name is None

    def test_unparsable_optional_field_drops_row(self) -> None:
        """Test a present but non-numeric pixel coordinate drops the row."""
        result = import_points("1,2,0,left,200,img.jpg,A", GcpFormat.CSV_7FIELD)

        assert result.points == []
        assert "pixelX" in result.malformed_rows[0].reason

    def test_string_fields_trimmed(self) -> None:
        """Test name and image name lose surrounding whitespace."""
        result = import_points("1,2,0,1,1,  img.jpg  ,  PointA  \r\n", GcpFormat.CSV_7FIELD)

        assert result.points[0].name == "PointA"
        assert result.points[0].image_name == "img.jpg"

    def test_extra_fields_ignored(self) -> None:
        """Test trailing fields past the seventh are ignored."""
        result = import_points("1,2,0,1,1,img.jpg,A,extra,more", GcpFormat.CSV_7FIELD)

        assert result.points[0].name == "A"

    def test_blank_lines_skipped(self) -> None:
        """Test blank and whitespace-only lines are neither points nor malformed."""
        text = "\n   \n1,2,0,1,1,img.jpg,A\n\t\n"

        result = import_points(text, GcpFormat.CSV_7FIELD)

        assert len(result.points) == 1
        assert result.skipped == 0


class TestImportWhitespaceText:
    """Tests for the whitespace-separated 7-field format."""

    def test_crs_header_extracted(self) -> None:
        """Test a leading +proj line becomes the CRS and is not a point row."""
        text = "+proj=longlat +datum=WGS84\n1 2 0 100 200 img1.jpg A\n"

        result = import_points(text, GcpFormat.TEXT_WHITESPACE_7FIELD)

        assert result.crs == "+proj=longlat +datum=WGS84"
        assert len(result.points) == 1
        assert result.skipped == 0

    def test_crs_after_blank_lines(self) -> None:
        """Test the CRS is found on the first non-blank line."""
        text = "\n\n+proj=utm +zone=30 +ellps=WGS84 +units=m\n1 2 0 1 1 a.jpg A"

        result = import_points(text, GcpFormat.TEXT_WHITESPACE_7FIELD)

        assert result.crs == "+proj=utm +zone=30 +ellps=WGS84 +units=m"

    def test_no_crs_header(self) -> None:
        """Test files without a header have no CRS and keep every row."""
        result = import_points("1 2 0 1 1 a.jpg A\n3 4 0 1 1 b.jpg B", GcpFormat.TEXT_WHITESPACE_7FIELD)

        assert result.crs is None
        assert len(result.points) == 2

    def test_crs_only_checked_on_first_line(self) -> None:
        """Test a +proj line further down is a malformed row, not a CRS."""
        text = "1 2 0 1 1 a.jpg A\n+proj=longlat +datum=WGS84"

        result = import_points(text, GcpFormat.TEXT_WHITESPACE_7FIELD)

        assert result.crs is None
        assert result.skipped == 1

    def test_mixed_whitespace_runs(self) -> None:
        """Test tabs and repeated spaces both separate fields."""
        result = import_points("  1\t\t2   0 100\t200 img1.jpg   A  ", GcpFormat.TEXT_WHITESPACE_7FIELD)

        point = result.points[0]
        assert (point.x, point.y, point.pixel_x, point.pixel_y) == (1.0, 2.0, 100.0, 200.0)
        assert point.name == "A"

    def test_tab_rows_keep_empty_fields(self) -> None:
        """Test consecutive tabs mark absent values instead of collapsing."""
        result = import_points("1\t2\t0\t\t\timg.jpg\tP1", GcpFormat.TEXT_WHITESPACE_7FIELD)

        point = result.points[0]
        assert (point.pixel_x, point.pixel_y) == (None, None)
        assert (point.image_name, point.name) == ("img.jpg", "P1")

    def test_tab_rows_allow_spaces_in_names(self) -> None:
        """Test names and image names with spaces survive tab-delimited rows."""
        result = import_points(
            "1\t2\t0\t10\t20\timg 1.jpg\tPoint A", GcpFormat.TEXT_WHITESPACE_7FIELD
        )

        point = result.points[0]
        assert (point.image_name, point.name) == ("img 1.jpg", "Point A")
        assert (point.pixel_x, point.pixel_y) == (10.0, 20.0)

    @pytest.mark.parametrize(
        "fmt", [GcpFormat.TEXT_3FIELD, GcpFormat.CSV_3FIELD], ids=["text-3field", "csv-3field"]
    )
    def test_lat_lng_points_survive_text_export(self, fmt: GcpFormat) -> None:
        """Test lat/lng points re-import from the text format they export to."""
        original = import_points("PointA,39.5,-0.3", fmt).points
        text = export_text(original, GcpFormat.TEXT_WHITESPACE_7FIELD)

        result = import_points(text, GcpFormat.TEXT_WHITESPACE_7FIELD)

        assert result.status is ImportStatus.OK
        assert result.points == original

    def test_six_fields_dropped(self) -> None:
        """Test rows missing the name field are dropped."""
        result = import_points("1 2 0 100 200 img1.jpg", GcpFormat.TEXT_WHITESPACE_7FIELD)

        assert result.status is ImportStatus.NO_VALID_ROWS

    def test_crs_not_extracted_for_csv(self) -> None:
        """Test CSV formats treat a +proj line as an ordinary bad row."""
        result = import_points("+proj=longlat\n1,2,0,1,1,a.jpg,A", GcpFormat.CSV_7FIELD)

        assert result.crs is None
        assert result.skipped == 1


class TestImportLatLng:
    """Tests for the 3-field name,lat,lng formats."""

    @pytest.mark.parametrize("fmt", [GcpFormat.CSV_3FIELD, GcpFormat.TEXT_3FIELD], ids=["csv", "text"])
    def test_lat_lng_rows(self, fmt: GcpFormat) -> None:
        """Test name, lat and lng populate name, y and x."""
        result = import_points("PointA, 39.64, -0.23\nPointB,39.65,-0.24", fmt)

        assert [p.name for p in result.points] == ["PointA", "PointB"]
        assert result.points[0].lat == pytest.approx(39.64)
        assert result.points[0].lng == pytest.approx(-0.23)
        assert result.points[0].z == 0.0
        assert result.points[0].image_name is None

    def test_csv_reader_handles_quoted_names(self) -> None:
        """Test the CSV variant understands quoted names containing commas."""
        result = import_points('"Tower, north",39.64,-0.23', GcpFormat.CSV_3FIELD)

        assert result.points[0].name == "Tower, north"

    @pytest.mark.parametrize("fmt", [GcpFormat.CSV_3FIELD, GcpFormat.TEXT_3FIELD], ids=["csv", "text"])
    def test_bad_rows_dropped(self, fmt: GcpFormat) -> None:
        """Test short rows and non-numeric coordinates are dropped."""
        text = "A,1,2\nB,1\nC,north,2\nD,3,4"

        result = import_points(text, fmt)

        assert [p.name for p in result.points] == ["A", "D"]
        assert result.skipped == 2


class TestImportEdgeCases:
    """Tests for empty input, ids, decoding and logging."""

    @pytest.mark.parametrize("raw", ["", "   \n\t\n", None, b""], ids=["empty", "whitespace", "none", "bytes"])
    @pytest.mark.parametrize("fmt", list(GcpFormat), ids=[f.value for f in GcpFormat])
    def test_empty_input_is_not_an_error(self, raw: str | bytes | None, fmt: GcpFormat) -> None:
        """Test empty input yields an empty result flagged EMPTY_INPUT."""
        result = import_points(raw, fmt)

        assert result.points == []
        assert len(result.groups) == 0
        assert result.status is ImportStatus.EMPTY_INPUT
        assert result.is_empty

    def test_all_malformed_is_distinguishable(self) -> None:
        """Test every row failing gives NO_VALID_ROWS rather than EMPTY_INPUT."""
        result = import_points("garbage\nmore garbage", GcpFormat.CSV_7FIELD)

        assert result.is_empty
        assert result.status is ImportStatus.NO_VALID_ROWS
        assert result.skipped == 2

    def test_wrong_type_raises(self) -> None:
        """Test structural misuse raises TypeError."""
        with pytest.raises(TypeError):
            import_points(["1,2,0,1,1,a.jpg,A"], GcpFormat.CSV_7FIELD)  # type: ignore[arg-type]

    def test_unknown_format_raises(self) -> None:
        """Test an unknown format name raises ValueError."""
        with pytest.raises(ValueError):
            import_points(EXAMPLE_CSV, "kml")

    def test_format_by_name(self) -> None:
        """Test formats can be given by value string."""
        assert len(import_points(EXAMPLE_CSV, "csv-7field").points) == 2

    def test_bytes_with_bom(self) -> None:
        """Test UTF-8 bytes with a BOM decode cleanly."""
        raw = "\ufeff1,2,0,1,1,a.jpg,Punto Ñ".encode("utf-8")

        result = import_points(raw, GcpFormat.CSV_7FIELD)

        assert result.points[0].x == 1.0
        assert result.points[0].name == "Punto Ñ"

    def test_ids_unique_and_in_order(self) -> None:
        """Test each surviving row gets a fresh id in input order."""
        text = "1,2,0,1,1,a.jpg,A\nbad\n3,4,0,1,1,b.jpg,A"

        result = import_points(text, GcpFormat.CSV_7FIELD, id_factory=_counter_ids())

        assert [p.id for p in result.points] == ["id1", "id2"]

    def test_default_ids_unique(self) -> None:
        """Test default ids differ between points."""
        result = import_points(EXAMPLE_CSV, GcpFormat.CSV_7FIELD)

        assert len({p.id for p in result.points}) == 2

    def test_duplicate_ids_from_factory_raise(self) -> None:
        """Test an id factory repeating itself is refused."""
        with pytest.raises(ValueError, match="duplicate"):
            import_points(EXAMPLE_CSV, GcpFormat.CSV_7FIELD, id_factory=lambda: "same")

    def test_idempotent(self) -> None:
        """Test identical input gives equal points and groups."""
        first = import_points(EXAMPLE_CSV, GcpFormat.CSV_7FIELD)
        second = import_points(EXAMPLE_CSV, GcpFormat.CSV_7FIELD)

        assert first.points == second.points
        assert first.groups.names == second.groups.names

    def test_grouping_repeated_names(self) -> None:
        """Test several images of one point share a group in input order."""
        text = "1,2,0,1,1,a.jpg,A\n5,6,0,1,1,c.jpg,B\n1,2,0,9,9,b.jpg,A"

        result = import_points(text, GcpFormat.CSV_7FIELD)

        assert result.groups.image_names("A") == ["a.jpg", "b.jpg"]
        assert result.groups.image_names("B") == ["c.jpg"]

    def test_logs_skipped_rows(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test dropped rows are logged at debug level."""
        with caplog.at_level(logging.DEBUG, logger="gcp_editor.importer"):
            import_points("1,2,0,1,1,a.jpg,A\nbad", GcpFormat.CSV_7FIELD)

        assert any("Skipping line 2" in record.getMessage() for record in caplog.records)


class TestReadGcpFile:
    """Tests for read_gcp_file."""

    def test_reads_content(self, tmp_path: Path) -> None:
        """Test a non-empty file is returned as text."""
        path = tmp_path / "gcps.csv"
        path.write_text(EXAMPLE_CSV, encoding="utf-8")

        assert read_gcp_file(path) == EXAMPLE_CSV

    @pytest.mark.parametrize("path", [None, ""], ids=["none", "empty-string"])
    def test_no_file_supplied(self, path: str | None) -> None:
        """Test a missing selection raises EmptyInputError."""
        with pytest.raises(EmptyInputError):
            read_gcp_file(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test a path that does not exist raises EmptyInputError."""
        with pytest.raises(EmptyInputError, match="not found"):
            read_gcp_file(tmp_path / "nope.csv")

    def test_whitespace_only_file(self, tmp_path: Path) -> None:
        """Test a file with only whitespace counts as empty."""
        path = tmp_path / "blank.txt"
        path.write_text("  \n\t\n", encoding="utf-8")

        with pytest.raises(EmptyInputError, match="empty"):
            read_gcp_file(path)

    def test_empty_input_error_is_value_error(self) -> None:
        """Test callers catching ValueError also see EmptyInputError."""
        assert issubclass(EmptyInputError, ValueError)
