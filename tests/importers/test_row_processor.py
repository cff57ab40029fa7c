import pytest

from import_engine.report import Status
from import_engine.row_processor import (
    RowError,
    RowProcessor,
    normalize_header,
    normalize_status,
    parse_genres,
    parse_rating,
    rows_to_result,
)


@pytest.mark.parametrize("header, expected", [
    ("Título", "title"),
    ("  TITULO ", "title"),
    ("Nome", "title"),
    ("Nota", "rating"),
    ("Avaliação", "rating"),
    ("Plataforma", "platform"),
    ("Gêneros", "genres"),
    ("Autor", "author"),
    ("Sinopse", "synopsis"),
    ("Ano", "ano"),
])
def test_normalize_header(header, expected):
    """Test that PT/EN header synonyms resolve to canonical names."""
    assert normalize_header(header) == expected


def test_normalize_header_is_idempotent():
    """Test that a normalized header maps to itself."""
    for header in ("Título", "Nota", "Ano de Lançamento", "ISBN"):
        once = normalize_header(header)
        assert normalize_header(once) == once


@pytest.mark.parametrize("value, expected", [
    ("Assistindo", Status.WATCHING),
    ("  completo ", Status.COMPLETED),
    ("Zerado", Status.COMPLETED),
    ("casual", Status.CASUAL),
    ("whatever", Status.PENDING),
    (None, Status.PENDING),
])
def test_normalize_status(value, expected):
    """Test that status values map to the closed set, defaulting to PENDING."""
    assert normalize_status(value) == expected


@pytest.mark.parametrize("value, expected", [
    ("9,5", 9.5),
    ("9.5", 9.5),
    (" 7 ", 7.0),
    ("15", 10.0),
    ("-3", 0.0),
    (8.25, 8.3),
    (0, 0.0),
    ("abc", None),
    ("", None),
    (None, None),
    (float("nan"), None),
    (".5", 0.5),
    ("1e1", 10.0),
    ("1_0", None),
    ("infinity", None),
    ("inf", None),
    ("nan", None),
    ("9,5,1", None),
])
def test_parse_rating(value, expected):
    """Test rating parsing, clamping and rounding."""
    assert parse_rating(value) == expected


def test_non_numeric_rating_is_absent_not_zero():
    """Test that a non-numeric rating never becomes 0."""
    assert parse_rating("ótimo") is None


def test_parse_genres():
    """Test that an empty genre cell means absent, not empty."""
    assert parse_genres(None) is None
    assert parse_genres("") is None
    assert parse_genres("   ") is None
    assert parse_genres("Ação, Drama;Sci-Fi | ") == ("Ação", "Drama", "Sci-Fi")


def test_process_requires_title():
    """Test that a blank title rejects the row."""
    proc = RowProcessor(["Título", "Nota"])
    with pytest.raises(RowError):
        proc.process({"Título": "   ", "Nota": "8"})


def test_process_defaults_and_extras():
    """Test defaults for missing fields and passthrough of unknown columns."""
    proc = RowProcessor(["Título", "Nota", "Status", "Ano", "Vazio"])
    row = proc.process({"Título": " Matrix ", "Nota": "nope", "Status": "",
                        "Ano": "1999", "Vazio": ""})

    assert row.title == "Matrix"
    assert row.status == Status.PENDING
    assert row.rating is None
    assert row.platform is None
    assert row.genres is None
    assert row.extra == {"ano": "1999"}


def test_rows_to_result_reports_spreadsheet_line_numbers():
    """Test that skipped rows are reported by their line in the file."""
    raw = [
        {"Título": "Matrix", "Nota": "9,5"},
        {"Título": "", "Nota": "7"},
        {"Título": "Alien", "Nota": ""},
    ]
    result = rows_to_result(raw)

    assert [r.title for r in result.rows] == ["Matrix", "Alien"]
    assert result.rows[0].rating == 9.5
    assert result.errors == ("Linha 3: título vazio, ignorada.",)
    assert result.headers == ("title", "rating")


def test_rows_to_result_empty_input():
    """Test that no raw rows give an empty, error-free result."""
    result = rows_to_result([])
    assert result.rows == ()
    assert result.errors == ()
