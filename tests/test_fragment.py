"""
Fragment builder tests: layouts, striping, collapsible sections, streaming,
and the handling of bad or heterogeneous input.
"""

import re

import pytest
from markupsafe import Markup
from pydantic import BaseModel

from enhtml.columns import ComputedColumn
from enhtml.errors import FragmentClosedError
from enhtml.fragment import FragmentBuilder, Layout, render_fragment

SERVICES = [
    {"name": "svc1", "state": "Stopped"},
    {"name": "svc2", "state": "Stopped"},
]


def _row_classes(fragment: str):
    """Class of every data row (rows holding <td> cells), None when absent."""
    classes = []
    for m in re.finditer(r"<tr( class=\"([^\"]*)\")?>(<t[dh])", fragment):
        if m.group(3) == "<td":
            classes.append(m.group(2))
    return classes


# ---------------------------------------------------------------------------
# Table layout
# ---------------------------------------------------------------------------

def test_table_scenario_exact_output():
    out = render_fragment(SERVICES, "tbl1", "div1", even_row_class="e", odd_row_class="o")
    assert out == (
        '<div id="div1">\n'
        '<table id="tbl1">\n'
        "<tr><th>name</th><th>state</th></tr>\n"
        '<tr class="o"><td>svc1</td><td>Stopped</td></tr>\n'
        '<tr class="e"><td>svc2</td><td>Stopped</td></tr>\n'
        "</table>\n"
        "</div>"
    )


def test_table_header_written_once():
    records = [{"name": f"svc{i}", "state": "Running"} for i in range(7)]
    out = render_fragment(records, "t", "d")
    assert out.count("<th>") == 2
    assert out.count("<tr>") == 8


@pytest.mark.parametrize("count", [1, 2, 3, 8, 13])
def test_table_striping_by_row_position(count):
    records = [{"n": i} for i in range(count)]
    out = render_fragment(records, "t", "d", even_row_class="even", odd_row_class="odd")
    expected = ["odd" if i % 2 == 1 else "even" for i in range(1, count + 1)]
    assert _row_classes(out) == expected


def test_table_rows_unclassed_without_stripe_names():
    out = render_fragment(SERVICES, "t", "d")
    assert "class=" not in out


def test_table_and_div_classes():
    out = render_fragment(SERVICES, "t", "d", table_class="grid", div_class="box")
    assert '<div id="d" class="box">' in out
    assert '<table id="t" class="grid">' in out


def test_pinned_columns_choose_and_order_cells():
    out = render_fragment(SERVICES, "t", "d", properties=["state", "name"])
    assert "<tr><th>state</th><th>name</th></tr>" in out
    assert "<tr><td>Stopped</td><td>svc1</td></tr>" in out


def test_computed_column_value_and_cell_class():
    disks = [
        {"device_id": "C:", "size": 100, "free_space": 5},
        {"device_id": "D:", "size": 100, "free_space": 50},
    ]
    out = render_fragment(
        disks, "t", "d",
        properties=[
            "device_id",
            {
                "label": "Free %",
                "value": lambda r: r["free_space"] * 100 // r["size"],
                "css": lambda r: "red" if r["free_space"] * 10 < r["size"] else None,
            },
        ],
    )
    assert "<tr><th>device_id</th><th>Free %</th></tr>" in out
    assert '<tr><td>C:</td><td class="red">5</td></tr>' in out
    assert "<tr><td>D:</td><td>50</td></tr>" in out


def test_values_and_labels_are_escaped():
    out = render_fragment([{"a<b": "x & y"}], "t", "d")
    assert "<th>a&lt;b</th>" in out
    assert "<td>x &amp; y</td>" in out


def test_computed_markup_value_is_not_escaped():
    out = render_fragment(
        [{"url": "http://h/"}], "t", "d",
        properties=[{"label": "link", "value": lambda r: Markup('<a href="%s">go</a>') % r["url"]}],
    )
    assert '<td><a href="http://h/">go</a></td>' in out


def test_missing_key_renders_empty_cell():
    out = render_fragment([{"name": "a"}], "t", "d", properties=["name", "pid"])
    assert "<tr><td>a</td><td></td></tr>" in out


def test_pydantic_records():
    class Proc(BaseModel):
        name: str
        id: int

    out = render_fragment([Proc(name="init", id=1)], "t", "d")
    assert "<tr><th>name</th><th>id</th></tr>" in out
    assert "<tr><td>init</td><td>1</td></tr>" in out


def test_column_callables_see_whole_record_independently():
    seen = []

    def value(record):
        seen.append(dict(record))
        return record["a"] + record["b"]

    out = render_fragment([{"a": 1, "b": 2}, {"a": 3, "b": 4}], "t", "d",
                          properties=[{"label": "sum", "value": value}])
    assert "<td>3</td>" in out and "<td>7</td>" in out
    assert seen == [{"a": 1, "b": 2}, {"a": 3, "b": 4}]


# ---------------------------------------------------------------------------
# List layout
# ---------------------------------------------------------------------------

def test_list_scenario_single_record():
    out = render_fragment([{"a": 1, "b": 2}], "t", "d", layout=Layout.LIST)
    assert out == (
        '<div id="d">\n'
        '<table id="t">\n'
        "<tr><td>a</td><td>1</td></tr>\n"
        "<tr><td>b</td><td>2</td></tr>\n"
        "</table>\n"
        "</div>"
    )
    assert "<th" not in out


def test_list_striping_follows_records_not_cells():
    records = [{"a": 1, "b": 2}, {"a": 3, "b": 4}, {"a": 5, "b": 6}]
    out = render_fragment(records, "t", "d", layout="list", even_row_class="e", odd_row_class="o")
    assert _row_classes(out) == ["o", "o", "e", "e", "o", "o"]


def test_list_computed_css_on_value_cell():
    out = render_fragment(
        [{"state": "Stopped"}], "t", "d", layout=Layout.LIST,
        properties=[{"label": "State", "value": "state", "css": lambda r: "red"}],
    )
    assert '<tr><td>State</td><td class="red">Stopped</td></tr>' in out


# ---------------------------------------------------------------------------
# Collapsible sections, pre/post content
# ---------------------------------------------------------------------------

def test_hidden_section_header_toggles_container():
    out = render_fragment(SERVICES, "t", "div1", pre_content="<h2>X</h2>", hidden_section=True)
    assert out.startswith(
        "<span class=\"sectionheader\" onclick=\"$('#div1').toggle(500);\"><h2>X</h2></span>\n"
    )
    assert '<div id="div1" style="display:none;">' in out
    assert "href" not in out


def test_hidden_section_with_div_class():
    out = render_fragment([], "t", "d", hidden_section=True, div_class="box")
    assert '<div id="d" style="display:none;" class="box">' in out


def test_pre_and_post_content_are_verbatim():
    out = render_fragment(SERVICES, "t", "d", pre_content="<h2>Services</h2>", post_content="<p>end</p>")
    assert out.startswith("<h2>Services</h2>\n<div id=\"d\">")
    assert out.endswith("</div>\n<p>end</p>")
    assert "<span" not in out


# ---------------------------------------------------------------------------
# Empty and heterogeneous input
# ---------------------------------------------------------------------------

def test_empty_wildcard_table_is_empty_shell():
    out = render_fragment([], "t", "d")
    assert out == '<div id="d">\n<table id="t">\n</table>\n</div>'


def test_empty_pinned_table_keeps_header():
    out = render_fragment([], "t", "d", properties=["name", {"label": "Up", "value": "state"}])
    assert out == '<div id="d">\n<table id="t">\n<tr><th>name</th><th>Up</th></tr>\n</table>\n</div>'


def test_empty_list_is_empty_shell():
    out = render_fragment([], "t", "d", layout=Layout.LIST, properties=["a"])
    assert out == '<div id="d">\n<table id="t">\n</table>\n</div>'


def test_heterogeneous_wildcard_records_give_ragged_rows():
    """Wildcard columns are resolved per record; mismatched shapes are not reconciled."""
    records = [{"name": "a", "state": "Running"}, {"pid": 7}]
    out = render_fragment(records, "t", "d")
    assert "<tr><th>name</th><th>state</th></tr>" in out
    assert "<tr><td>a</td><td>Running</td></tr>" in out
    assert "<tr><td>7</td></tr>" in out


@pytest.mark.parametrize("layout", [Layout.TABLE, Layout.LIST])
@pytest.mark.parametrize("hidden", [False, True])
def test_fragments_are_well_formed(well_formed, layout, hidden):
    records = [{"name": "a", "state": "x<y"}, {"other": 1}, {}]
    for recs in (records, []):
        out = render_fragment(
            recs, "t", "d",
            layout=layout,
            even_row_class="e",
            odd_row_class="o",
            pre_content="<h2>Heading</h2>",
            post_content="<p>tail</p>",
            hidden_section=hidden,
        )
        well_formed(out)


# ---------------------------------------------------------------------------
# Invalid column descriptors
# ---------------------------------------------------------------------------

def test_invalid_column_renders_empty_cells_and_warns():
    builder = FragmentBuilder(
        "t", "d",
        properties=["name", {"label": "Broken"}, "state"],
    )
    out = builder.build(SERVICES)
    assert "<tr><th>name</th><th>Broken</th><th>state</th></tr>" in out
    assert "<tr><td>svc1</td><td></td><td>Stopped</td></tr>" in out
    assert len(builder.warnings) == 1
    assert builder.warnings[0]["source"] == "fragment"
    assert "Broken" in builder.warnings[0]["message"]


def test_invalid_column_without_label_has_empty_header_cell():
    builder = FragmentBuilder("t", "d", properties=[{"value": lambda r: 1}, "name"])
    out = builder.build(SERVICES[:1])
    assert "<tr><th></th><th>name</th></tr>" in out
    assert builder.warnings


def test_invalid_column_row_skipped_in_list_layout():
    builder = FragmentBuilder("t", "d", layout=Layout.LIST, properties=["name", {"label": "Broken"}])
    out = builder.build(SERVICES[:1])
    assert "Broken" not in out
    assert "<tr><td>name</td><td>svc1</td></tr>" in out
    assert len(builder.warnings) == 1


def test_unlabelled_computed_column_object_is_reported():
    builder = FragmentBuilder(
        "t", "d",
        properties=[ComputedColumn(label="", expression=lambda r: 1), "a"],
    )
    out = builder.build([{"a": 1}])
    assert "<tr><th></th><th>a</th></tr>" in out
    assert "<tr><td></td><td>1</td></tr>" in out
    assert len(builder.warnings) == 1
    assert "no label" in builder.warnings[0]["message"]


def test_labelled_computed_column_object_is_accepted():
    builder = FragmentBuilder(
        "t", "d",
        properties=[ComputedColumn(label="double", expression=lambda r: r["a"] * 2)],
    )
    out = builder.build([{"a": 4}])
    assert "<tr><th>double</th></tr>" in out
    assert "<tr><td>8</td></tr>" in out
    assert builder.warnings == []


def test_column_callable_errors_propagate():
    def boom(record):
        raise KeyError("size")

    with pytest.raises(KeyError):
        render_fragment([{"a": 1}], "t", "d", properties=[{"label": "x", "value": boom}])


# ---------------------------------------------------------------------------
# Streaming
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("layout", [Layout.TABLE, Layout.LIST])
def test_streaming_matches_one_shot(layout):
    records = [{"name": f"p{i}", "id": i} for i in range(5)]
    options = dict(layout=layout, even_row_class="e", odd_row_class="o",
                   pre_content="<h2>P</h2>", hidden_section=True)

    builder = FragmentBuilder("t", "d", **options)
    for record in records:
        builder.add(record)
    assert builder.records == 5
    assert builder.close() == render_fragment(records, "t", "d", **options)


def test_close_is_repeatable_and_add_after_close_fails():
    builder = FragmentBuilder("t", "d")
    builder.add({"a": 1})
    first = builder.close()
    assert builder.close() == first
    assert builder.closed
    with pytest.raises(FragmentClosedError):
        builder.add({"a": 2})


def test_builders_do_not_share_state():
    a = FragmentBuilder("t1", "d1", even_row_class="e", odd_row_class="o")
    b = FragmentBuilder("t2", "d2", even_row_class="e", odd_row_class="o")
    a.add({"x": 1})
    b.add({"x": 1})
    a.add({"x": 2})
    assert _row_classes(a.close()) == ["o", "e"]
    assert _row_classes(b.close()) == ["o"]


def test_properties_may_be_a_generator():
    columns = (name for name in ["state", "name"])
    out = render_fragment(SERVICES, "t", "d", properties=columns)
    assert "<tr><th>state</th><th>name</th></tr>" in out
    assert "<tr><td>Stopped</td><td>svc2</td></tr>" in out


def test_properties_may_be_a_tuple():
    out = render_fragment(SERVICES[:1], "t", "d", properties=("name",))
    assert "<tr><th>name</th></tr>" in out


def test_ids_are_required():
    with pytest.raises(ValueError):
        FragmentBuilder("", "d")
    with pytest.raises(ValueError):
        FragmentBuilder("t", "")
