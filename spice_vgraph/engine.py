"""
Simulation entry point: runs a netlist through ngspice and returns
transient voltage graph records.
"""
import logging
import threading
from typing import Callable, Optional

from fastapi.concurrency import run_in_threadpool

from .circuit_json import voltage_graphs_to_circuit_json
from .ngspice_wrapper import NgspiceWrapper
from .models import SimulateResponse
from .vgraphs import result_to_vgraphs

logger = logging.getLogger(__name__)


class EngineProvider:
    """Creates the ngspice engine on first use and shares it afterwards.

    A failed start is not remembered; the next call tries again.
    """

    def __init__(self, factory: Callable[[], NgspiceWrapper] = NgspiceWrapper):
        self._factory = factory
        self._engine: Optional[NgspiceWrapper] = None
        self._lock = threading.Lock()

    def get(self) -> NgspiceWrapper:
        with self._lock:
            if self._engine is None:
                try:
                    self._engine = self._factory()
                except Exception as e:
                    logger.error(f"Failed to start simulation engine: {e}")
                    raise
            return self._engine

    def reset(self):
        with self._lock:
            self._engine = None


engine_provider = EngineProvider()


async def simulate(
    spice_string: str,
    provider: Optional[EngineProvider] = None,
    simulation_experiment_id: Optional[str] = None,
) -> SimulateResponse:
    """Simulate a netlist and convert its output to voltage graph records.

    Engine failures are logged and re-raised unchanged.
    """
    provider = provider or engine_provider
    engine = await run_in_threadpool(provider.get)

    try:
        result = await run_in_threadpool(engine.run, spice_string)
    except Exception as e:
        logger.error(f"Simulation failed: {e}")
        raise

    if result is None:
        return SimulateResponse(simulation_result_circuit_json=[])

    graphs = result_to_vgraphs(result, spice_string)
    return SimulateResponse(
        simulation_result_circuit_json=voltage_graphs_to_circuit_json(
            graphs, spice_string, simulation_experiment_id
        )
    )


class NgspiceSpiceEngine:
    """Spice engine object exposing a single async `simulate` call."""

    def __init__(self, provider: Optional[EngineProvider] = None):
        self.provider = provider or engine_provider

    async def simulate(self, spice_string: str) -> SimulateResponse:
        return await simulate(spice_string, self.provider)


async def create_ngspice_spice_engine(provider: Optional[EngineProvider] = None) -> NgspiceSpiceEngine:
    return NgspiceSpiceEngine(provider)
