from typing import List, Optional

from . import config
from .models import SimulationTransientVoltageGraph, VoltageGraph
from .tran_params import parse_tran_params


def voltage_graphs_to_circuit_json(
    graphs: List[VoltageGraph],
    spice_string: str,
    simulation_experiment_id: Optional[str] = None,
) -> List[SimulationTransientVoltageGraph]:
    """Build one transient-voltage-graph record per graph, in milliseconds."""
    tran_params = parse_tran_params(spice_string)
    tstart = tran_params.tstart if tran_params and tran_params.tstart is not None else 0
    tstep = tran_params.tstep if tran_params and tran_params.tstep is not None else 0
    tstop = tran_params.tstop if tran_params and tran_params.tstop is not None else 0
    experiment_id = simulation_experiment_id or config.SIMULATION_EXPERIMENT_ID

    return [
        SimulationTransientVoltageGraph(
            simulation_experiment_id=experiment_id,
            simulation_transient_voltage_graph_id=f"simulation_graph_{graph.net_name}",
            name=graph.net_name,
            voltage_levels=graph.voltage,
            timestamps_ms=[t * 1000 for t in graph.time],
            start_time_ms=tstart * 1000,
            time_per_step=tstep * 1000,
            end_time_ms=tstop * 1000,
        )
        for graph in graphs
    ]
