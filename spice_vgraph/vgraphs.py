"""
Conversion of raw ngspice results into named voltage graphs.

The `.print tran` line of the netlist selects which signals are returned
and in which order. Without it every voltage channel is returned as-is.
With it, the graphs are resampled onto the `.tran` step grid.
"""
import logging
import math
import re
from typing import Dict, List, Optional

import numpy as np

from .interpolation import linear_interpolate
from .models import ChannelKind, RawResultBundle, VoltageGraph
from .tran_params import parse_tran_params

logger = logging.getLogger(__name__)

_PRINT_TRAN_RE = re.compile(r'\.print\s+tran\s+(.*)', re.IGNORECASE)
_PLOT_TOKEN_RE = re.compile(r'[VI]\s*\([^)]+\)', re.IGNORECASE)
_DIFF_RE = re.compile(r'^v\(([^,]+),\s*([^)]+)\)$', re.IGNORECASE)
_SINGLE_RE = re.compile(r'^v\((.*)\)$', re.IGNORECASE)


def normalize_signal_name(name: str) -> str:
    """Lookup key for a signal: lowercase with all whitespace removed."""
    return re.sub(r'\s', '', name.lower())


def extract_requested_plots(spice_string: str) -> Optional[Dict[str, str]]:
    """Map each requested plot's lookup key to the token as first written.

    Returns None when there is no `.print tran` line or it names no
    `V(...)`/`I(...)` references.
    """
    tokens = []
    for line in spice_string.splitlines():
        match = _PRINT_TRAN_RE.search(line)
        if match:
            tokens = _PLOT_TOKEN_RE.findall(match.group(1))
            break

    if not tokens:
        return None

    plots: Dict[str, str] = {}
    for token in tokens:
        plots.setdefault(normalize_signal_name(token), token)
    return plots


def get_net_name(raw_name: str, strip: bool = True) -> str:
    """Display name for a signal: 'out' for V(out), 'a-b' for V(a, b).

    Engine channel names keep the single-ended bracket content as-is
    (`strip=False`); requested tokens are trimmed.
    """
    diff_match = _DIFF_RE.match(raw_name)
    if diff_match:
        return f"{diff_match.group(1).strip()}-{diff_match.group(2).strip()}"

    match = _SINGLE_RE.match(raw_name)
    if not match:
        return raw_name
    return match.group(1).strip() if strip else match.group(1)


def _resolve_voltage(token: str, key: str, voltages: Dict[str, List[float]]) -> Optional[List[float]]:
    diff_match = _DIFF_RE.match(token)
    if not diff_match:
        return voltages.get(key)

    # Prefer a differential vector the simulator already produced
    combined = voltages.get(key)
    if combined is not None:
        return combined

    node1 = diff_match.group(1).strip().lower()
    node2 = diff_match.group(2).strip().lower()
    node1_data = voltages.get(normalize_signal_name(f"v({node1})"))
    node2_data = voltages.get(normalize_signal_name(f"v({node2})"))
    if node1_data is None or node2_data is None:
        return None

    return [
        v - (node2_data[i] if i < len(node2_data) else 0)
        for i, v in enumerate(node1_data)
    ]


def resample_graphs(graphs: List[VoltageGraph], spice_string: str) -> List[VoltageGraph]:
    """Resample graphs onto the fixed `.tran` step grid.

    The grid runs from tstart in floor((tstop - tstart) / tstep) steps, so it
    can stop short of tstop. Graphs are returned unchanged when the netlist
    gives no usable step.
    """
    params = parse_tran_params(spice_string)
    if params is None or not graphs:
        return graphs
    if params.tstep is None or params.tstep <= 0 or params.tstop is None:
        return graphs

    tstart = params.tstart if params.tstart is not None else 0
    span = (params.tstop - tstart) / params.tstep
    if not math.isfinite(span):
        logger.warning(f"Cannot resample: .tran gives a non-finite step count ({span})")
        return graphs
    num_steps = math.floor(span)
    if num_steps <= 0:
        return graphs

    try:
        new_time = (tstart + np.arange(num_steps + 1) * params.tstep).tolist()
    except (OverflowError, ValueError, MemoryError) as e:
        logger.warning(f"Cannot resample onto {num_steps} steps: {e}")
        return graphs
    # All ngspice vectors of one run share the same time base
    old_time = graphs[0].time
    return [
        VoltageGraph(
            net_name=graph.net_name,
            time=new_time,
            voltage=[linear_interpolate(t, old_time, graph.voltage) for t in new_time],
        )
        for graph in graphs
    ]


def result_to_vgraphs(result: Optional[RawResultBundle], spice_string: str) -> List[VoltageGraph]:
    """Turn a raw ngspice result into the voltage graphs the netlist asks for."""
    if result is None or not result.data or result.data_type != "real":
        return []

    time_channel = next((c for c in result.data if c.kind == ChannelKind.TIME), None)
    if time_channel is None:
        logger.warning("Simulation result has no time vector")
        return []
    time_values = time_channel.values

    voltage_channels = [c for c in result.data if c.kind == ChannelKind.VOLTAGE]
    voltages = {normalize_signal_name(c.name): c.values for c in voltage_channels}

    requested_plots = extract_requested_plots(spice_string)
    if requested_plots is None:
        return [
            VoltageGraph(net_name=get_net_name(c.name, strip=False), time=time_values, voltage=c.values)
            for c in voltage_channels
        ]

    graphs: List[VoltageGraph] = []
    for key, token in requested_plots.items():
        voltage = _resolve_voltage(token, key, voltages)
        if voltage is None:
            logger.warning(f"Requested plot '{token}' not found in simulation result.")
            continue
        graphs.append(VoltageGraph(net_name=get_net_name(token), time=time_values, voltage=voltage))

    return resample_graphs(graphs, spice_string)
