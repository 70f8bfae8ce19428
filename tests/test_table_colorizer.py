import pytest

from mailbox_reports.colorize import (
    ColorRule,
    ColumnNotFoundError,
    ConfigurationError,
    apply_rules,
    colorize,
    colorize_html,
)
from mailbox_reports.colorize.table_colorizer import resolve_column, validate_color


def test_cell_scope_colors_only_matching_cell(size_table):
    out = colorize(size_table, "Size", "red", "Size -gt 100")

    assert out[3] == '<tr><td>Alice</td><td style="background-color:red">120</td></tr>'
    assert out[4] == size_table[4]


def test_row_scope_styles_row_tag(size_table):
    out = colorize(size_table, "Size", "red", "Size -gt 100", row_scope=True)

    assert out[3] == '<tr style="background-color:red"><td>Alice</td><td>120</td></tr>'
    assert out[4] == size_table[4]


def test_line_count_and_order_preserved(status_table):
    out = colorize(status_table, "Status", "orange", "Status -ge 1", row_scope=True)

    assert len(out) == len(status_table)
    for before, after in zip(status_table, out):
        assert after.replace(' style="background-color:orange"', "") == before


def test_no_matches_returns_input_unchanged(status_table):
    assert colorize(status_table, "Status", "red", "Status -gt 99") == status_table


def test_input_is_not_modified(size_table):
    snapshot = list(size_table)
    colorize(size_table, "Size", "red", "Size -gt 0", row_scope=True)
    assert size_table == snapshot


@pytest.mark.parametrize("name", ["status", "STATUS", "Status", "sTaTuS"])
def test_column_resolution_ignores_case(status_table, name):
    out = colorize(status_table, name, "red", f"{name} -eq 3", row_scope=True)
    assert out[4].startswith('<tr style="background-color:red"><td>Carol</td>')


def test_filter_may_use_different_case_than_property(size_table):
    out = colorize(size_table, "Size", "red", "SIZE -gt 100")
    assert 'style="background-color:red">120' in out[3]


def test_row_recolor_replaces_previous_color(status_table):
    first = colorize(status_table, "Status", "red", "Status -ge 2", row_scope=True)
    second = colorize(first, "Status", "yellow", "Status -eq 3", row_scope=True)

    carol = second[4]
    assert carol.startswith('<tr style="background-color:yellow">')
    assert carol.count("background-color") == 1
    # Dave only matched the first rule
    assert second[5].startswith('<tr style="background-color:red">')


def test_cell_recolor_replaces_previous_color(size_table):
    first = colorize(size_table, "Size", "red", "Size -gt 100")
    second = colorize(first, "Size", "green", "Size -gt 110")

    assert second[3] == '<tr><td>Alice</td><td style="background-color:green">120</td></tr>'


def test_passes_on_different_columns_compose(status_table):
    cells = colorize(status_table, "Size", "#ffcccc", "Size -gt 1500")
    rows = colorize(cells, "Status", "red", "Status -eq 3", row_scope=True)

    assert rows[4] == (
        '<tr style="background-color:red"><td>Carol</td>'
        '<td style="background-color:#ffcccc">2,600.00</td><td>3</td></tr>'
    )
    # Alice: cell colour from the first pass survives the second
    assert rows[2] == '<tr><td>Alice</td><td style="background-color:#ffcccc">1,900.00</td><td>1</td></tr>'


def test_cell_keeps_existing_style_declarations():
    lines = [
        "<tr><th>Size</th></tr>",
        '<tr><td style="color:blue">120</td></tr>',
    ]
    out = colorize(lines, "Size", "red", "Size -gt 100")
    assert out[1] == '<tr><td style="color:blue;background-color:red">120</td></tr>'


def test_cell_with_bare_style_after_lookalike_attribute():
    lines = [
        "<tr><th>Name</th><th>Size</th></tr>",
        '<tr><td>A</td><td class="nostyle" style>120</td></tr>',
    ]
    out = colorize(lines, "Size", "red", "Size -gt 100")
    assert out[1] == '<tr><td>A</td><td class="nostyle" style="background-color:red">120</td></tr>'


def test_example_from_quota_report(size_table):
    out = colorize(size_table, "Size", "red", "Size -gt 100")
    assert "background-color" not in out[4]
    assert "background-color:red" in out[3]


def test_missing_column_raises_lookup_error(size_table):
    with pytest.raises(ColumnNotFoundError) as excinfo:
        colorize(size_table, "Quota", "red", "Quota -gt 1")
    assert isinstance(excinfo.value, LookupError)


def test_filter_not_referencing_property_raises(size_table):
    with pytest.raises(ConfigurationError, match="does not reference"):
        colorize(size_table, "Size", "red", "Name -eq 'Alice'")


def test_malformed_filter_raises_before_any_output(size_table):
    with pytest.raises(ConfigurationError):
        colorize(size_table, "Size", "red", "Size -gt")


def test_string_value_against_numeric_comparison_fails():
    lines = [
        "<tr><th>Name</th><th>Size</th></tr>",
        "<tr><td>Alice</td><td>120</td></tr>",
        "<tr><td>Bob</td><td>abc</td></tr>",
    ]
    with pytest.raises(ConfigurationError, match="cannot compare"):
        colorize(lines, "Size", "red", "Size -gt 5")


def test_data_row_without_header_fails():
    with pytest.raises(ColumnNotFoundError, match="before any header"):
        colorize(["<table>", "<tr><td>120</td></tr>", "</table>"], "Size", "red", "Size -gt 1")


def test_short_row_fails():
    lines = ["<tr><th>Name</th><th>Size</th></tr>", "<tr><td>Alice</td></tr>"]
    with pytest.raises(ColumnNotFoundError):
        colorize(lines, "Size", "red", "Size -gt 1")


def test_first_matching_header_wins():
    lines = [
        "<tr><th>Size</th><th>size</th></tr>",
        "<tr><td>1</td><td>500</td></tr>",
    ]
    out = colorize(lines, "SIZE", "red", "SIZE -gt 100")
    assert out[1] == lines[1]


def test_string_comparison_on_text_column(size_table):
    out = colorize(size_table, "Name", "lightblue", "Name -eq 'bob'")
    assert out[4] == '<tr><td style="background-color:lightblue">Bob</td><td>50</td></tr>'


def test_entities_are_compared_unescaped():
    lines = [
        "<tr><th>DisplayName</th></tr>",
        "<tr><td>O&#x27;Brien &amp; Co</td></tr>",
    ]
    out = colorize(lines, "DisplayName", "red", "DisplayName -eq \"O'Brien & Co\"")
    assert out[1] == '<tr><td style="background-color:red">O&#x27;Brien &amp; Co</td></tr>'


@pytest.mark.parametrize("color", ["red", "#f00", "#ff0000", "#ff000080", "rgb(255, 0, 0)"])
def test_valid_colors(color):
    assert validate_color(color) == color


@pytest.mark.parametrize("color", ["", "red;color:blue", '"red"', "#12", "url(x)"])
def test_invalid_colors(color, size_table):
    with pytest.raises(ConfigurationError):
        colorize(size_table, "Size", color, "Size -gt 1")


def test_resolve_column():
    assert resolve_column(["Name", "Size"], "size") == 1
    with pytest.raises(ColumnNotFoundError):
        resolve_column(["Name", "Size"], "Status")


def test_colorize_html_round_trips_text(size_table):
    html = "\n".join(size_table)
    out = colorize_html(html, "Size", "red", "Size -lt 100", row_scope=True)
    assert out.split("\n")[4] == '<tr style="background-color:red"><td>Bob</td><td>50</td></tr>'
    assert out.count("\n") == html.count("\n")


def test_apply_rules_in_order(status_table):
    rules = [
        ColorRule("Status", "yellow", "Status -eq 1", row_scope=True),
        ColorRule("Status", "orange", "Status -eq 2", row_scope=True),
        ColorRule("Status", "red", "Status -eq 3", row_scope=True),
        ColorRule("Size", "pink", "Size -ge 2000"),
    ]
    out = apply_rules("\n".join(status_table), rules).split("\n")

    assert out[2].startswith('<tr style="background-color:yellow">')
    assert out[3] == status_table[3]
    assert out[4].startswith('<tr style="background-color:red">')
    assert '<td style="background-color:pink">2,600.00</td>' in out[4]
    assert out[5].startswith('<tr style="background-color:orange">')


def test_apply_rules_failure_returns_nothing(status_table):
    rules = [
        ColorRule("Status", "red", "Status -eq 3", row_scope=True),
        ColorRule("Quota", "red", "Quota -gt 1"),
    ]
    with pytest.raises(ColumnNotFoundError):
        apply_rules("\n".join(status_table), rules)
