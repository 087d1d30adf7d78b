import pytest

from spice_vgraph.models import Channel, ChannelKind, RawResultBundle
from spice_vgraph.vgraphs import (
    extract_requested_plots,
    get_net_name,
    result_to_vgraphs,
)


def make_result(*signals, time=(0, 1, 2), data_type="real"):
    data = [Channel(kind=ChannelKind.TIME, name="time", values=list(time))]
    for name, values in signals:
        data.append(Channel(kind=ChannelKind.VOLTAGE, name=name, values=list(values)))
    return RawResultBundle(
        header="test",
        data_type=data_type,
        num_variables=len(data),
        num_points=len(time),
        variable_names=[c.name for c in data],
        data=data,
    )


@pytest.fixture
def base_result():
    return make_result(("V(out)", [0, 1, 2]), ("V(in)", [3, 4, 5]))


def test_includes_all_voltages_when_print_tran_is_absent(base_result):
    graphs = result_to_vgraphs(base_result, "")

    assert [g.net_name for g in graphs] == ["out", "in"]
    assert graphs[0].time == [0, 1, 2]
    assert graphs[0].voltage == [0, 1, 2]
    assert graphs[1].voltage == [3, 4, 5]


def test_unrestricted_mode_is_not_resampled(base_result):
    graphs = result_to_vgraphs(base_result, ".tran 0.5 2")

    assert graphs[0].time == [0, 1, 2]


def test_filters_to_requested_voltages(base_result):
    graphs = result_to_vgraphs(base_result, ".print tran v(out)")

    assert len(graphs) == 1
    assert graphs[0].net_name == "out"
    assert graphs[0].voltage == [0, 1, 2]


def test_requested_order_is_kept(base_result):
    graphs = result_to_vgraphs(base_result, ".PRINT TRAN V(in) V(out)")

    assert [g.net_name for g in graphs] == ["in", "out"]


def test_preserves_casing_from_spice_string():
    result = make_result(("v(mynet)", [0, 1, 2]))

    graphs = result_to_vgraphs(result, ".print tran V(MyNet)")

    assert len(graphs) == 1
    assert graphs[0].net_name == "MyNet"


def test_handles_differential_voltage_plots():
    result = make_result(("v(vp_out,n1)", [6, 7, 8]))

    graphs = result_to_vgraphs(result, ".print tran V(VP_OUT, N1)")

    assert len(graphs) == 1
    assert graphs[0].net_name == "VP_OUT-N1"
    assert graphs[0].voltage == [6, 7, 8]


def test_handles_both_normal_and_differential_voltage_plots():
    result = make_result(("v(vp_in1)", [3, 4, 5]), ("v(vp_out,n1)", [6, 7, 8]))

    graphs = result_to_vgraphs(result, ".print tran V(VP_IN1) V(VP_OUT, N1)")

    assert [g.net_name for g in graphs] == ["VP_IN1", "VP_OUT-N1"]


def test_calculates_differential_voltage_plots_from_nodes():
    result = make_result(("v(vp_out)", [10, 12, 14]), ("v(n1)", [6, 7, 8]))

    graphs = result_to_vgraphs(result, ".print tran V(VP_OUT, N1)")

    assert len(graphs) == 1
    assert graphs[0].net_name == "VP_OUT-N1"
    assert graphs[0].voltage == [4, 5, 6]


def test_differential_with_short_second_node_treats_missing_as_zero():
    result = make_result(("v(a)", [5, 5, 5]), ("v(b)", [1]))

    graphs = result_to_vgraphs(result, ".print tran V(a,b)")

    assert graphs[0].voltage == [4, 5, 5]


def test_differential_with_missing_node_is_dropped():
    result = make_result(("v(a)", [5, 5, 5]))

    assert result_to_vgraphs(result, ".print tran V(a,b)") == []


def test_missing_channel_is_dropped(base_result):
    graphs = result_to_vgraphs(base_result, ".print tran V(out) V(nowhere) I(V1)")

    assert [g.net_name for g in graphs] == ["out"]


def test_duplicate_requests_collapse_to_first_spelling(base_result):
    graphs = result_to_vgraphs(base_result, ".print tran V(OUT) v( out ) V(out)")

    assert [g.net_name for g in graphs] == ["OUT"]


@pytest.mark.parametrize("result", [
    None,
    RawResultBundle(data=[]),
    make_result(("v(out)", [0, 1, 2]), data_type="complex"),
    RawResultBundle(data=[Channel(kind=ChannelKind.VOLTAGE, name="v(out)", values=[1, 2])]),
])
def test_unusable_results_give_no_graphs(result):
    assert result_to_vgraphs(result, ".print tran v(out)") == []


def test_current_and_other_channels_are_not_graphed():
    result = make_result(("v(out)", [0, 1, 2]))
    result.data.append(Channel(kind=ChannelKind.CURRENT, name="i(v1)", values=[0, 0, 0]))

    graphs = result_to_vgraphs(result, "")

    assert [g.net_name for g in graphs] == ["out"]


def test_resamples_requested_plots_onto_tran_grid():
    result = make_result(("v(out)", [0, 10, 20]), time=(0, 1, 2))

    graphs = result_to_vgraphs(result, ".print tran v(out)\n.tran 0.5 2")

    assert graphs[0].time == [0, 0.5, 1.0, 1.5, 2.0]
    assert graphs[0].voltage == pytest.approx([0, 5, 10, 15, 20])


def test_resampling_grid_uses_floor_of_step_count():
    result = make_result(("v(out)", [0, 10, 20]), time=(0, 1, 2))

    graphs = result_to_vgraphs(result, ".print tran v(out)\n.tran 0.8 2")

    # floor(2 / 0.8) = 2 steps, so the grid stops at 1.6
    assert graphs[0].time == pytest.approx([0, 0.8, 1.6])
    assert graphs[0].voltage == pytest.approx([0, 8, 16])


def test_resampling_starts_at_tstart():
    result = make_result(("v(out)", [0, 10, 20]), time=(0, 1, 2))

    graphs = result_to_vgraphs(result, ".print tran v(out)\n.tran 0.5 2 1")

    assert graphs[0].time == [1.0, 1.5, 2.0]
    assert graphs[0].voltage == pytest.approx([10, 15, 20])


def test_resampling_applies_to_every_graph():
    result = make_result(("v(a)", [0, 2, 4]), ("v(b)", [4, 2, 0]))

    graphs = result_to_vgraphs(result, ".print tran v(a) v(b)\n.tran 1 2")

    assert [len(g.time) for g in graphs] == [3, 3]
    assert graphs[1].voltage == pytest.approx([4, 2, 0])


@pytest.mark.parametrize("tran", [".tran 0 2", ".tran 1", ".tran 5 2", ".tran", ""])
def test_no_resampling_without_usable_step(tran):
    result = make_result(("v(out)", [0, 10, 20]), time=(0, 1, 2))

    graphs = result_to_vgraphs(result, f".print tran v(out)\n{tran}")

    assert graphs[0].time == [0, 1, 2]
    assert graphs[0].voltage == [0, 10, 20]


def test_extract_requested_plots():
    plots = extract_requested_plots("V1 in 0 1\n.print tran V(a) i(V1) V(b, c) v(A)\n")

    assert plots == {"v(a)": "V(a)", "i(v1)": "i(V1)", "v(b,c)": "V(b, c)"}


def test_extract_requested_plots_without_references():
    assert extract_requested_plots(".print tran") is None
    assert extract_requested_plots(".print tran foo bar") is None
    assert extract_requested_plots(".print ac v(out)") is None


def test_only_first_print_tran_line_is_used():
    plots = extract_requested_plots(".print tran v(a)\n.print tran v(b)")

    assert list(plots) == ["v(a)"]


@pytest.mark.parametrize("raw,expected", [
    ("v(out)", "out"),
    ("V( out )", "out"),
    ("v(a,b)", "a-b"),
    ("V(VP_OUT, N1)", "VP_OUT-N1"),
    ("i(v1)", "i(v1)"),
    ("time", "time"),
])
def test_get_net_name(raw, expected):
    assert get_net_name(raw) == expected


@pytest.mark.parametrize("tran", [".tran 1n 1e999", ".tran 1e-300 1", ".tran 1 1e999 1e999"])
def test_extreme_tran_values_leave_graphs_unchanged(tran):
    result = make_result(("v(out)", [0, 10, 20]), time=(0, 1, 2))

    graphs = result_to_vgraphs(result, f".print tran v(out)\n{tran}")

    assert graphs[0].time == [0, 1, 2]
    assert graphs[0].voltage == [0, 10, 20]


def test_combined_differential_channel_wins_over_node_difference():
    result = make_result(("v(a,b)", [9, 9, 9]), ("v(a)", [5, 5, 5]), ("v(b)", [1, 1, 1]))

    graphs = result_to_vgraphs(result, ".print tran V(a,b)")

    assert len(graphs) == 1
    assert graphs[0].net_name == "a-b"
    assert graphs[0].voltage == [9, 9, 9]


def test_unrestricted_names_keep_engine_bracket_content():
    result = make_result(("v( out )", [0, 1, 2]), ("v(a, b)", [1, 1, 1]))

    graphs = result_to_vgraphs(result, "")

    assert [g.net_name for g in graphs] == [" out ", "a-b"]
