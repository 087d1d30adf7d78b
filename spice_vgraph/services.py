"""
Persistence of simulation runs and their voltage graph records in MongoDB.
"""
from datetime import datetime, timezone
from typing import List, Optional
from bson import ObjectId
from bson.errors import InvalidId
from fastapi import HTTPException, status

from .database import get_database, SIMULATIONS_COLLECTION
from .models import (
    SimulationHistory, SimulationHistoryResponse,
    SimulationTransientVoltageGraph,
)
from .tran_params import parse_tran_params

class SimulationHistoryService:
    """Service for storing and reading simulation runs"""

    def get_db(self):
        """Get database instance"""
        db = get_database()
        if db is None:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Simulation history unavailable: database not connected"
            )
        return db

    async def save_simulation(
        self,
        netlist: str,
        records: List[SimulationTransientVoltageGraph],
        execution_time: float
    ) -> SimulationHistoryResponse:
        """Store a finished run with its graph records"""
        db = self.get_db()

        tran_params = parse_tran_params(netlist)
        simulation_doc = {
            "netlist": netlist,
            "tran_params": tran_params.model_dump(exclude_none=True) if tran_params else None,
            "results": [record.model_dump() for record in records],
            "execution_time": execution_time,
            "created_at": datetime.now(timezone.utc)
        }

        result = await db[SIMULATIONS_COLLECTION].insert_one(simulation_doc)

        return SimulationHistoryResponse(
            id=str(result.inserted_id),
            graph_names=[record.name for record in records],
            execution_time=execution_time,
            created_at=simulation_doc["created_at"]
        )

    async def get_recent_simulations(self, limit: int = 50) -> List[SimulationHistoryResponse]:
        """Most recent runs first"""
        db = self.get_db()

        cursor = db[SIMULATIONS_COLLECTION].find({}).sort("created_at", -1).limit(limit)

        simulations = []
        async for sim_doc in cursor:
            simulations.append(SimulationHistoryResponse(
                id=str(sim_doc["_id"]),
                graph_names=[graph["name"] for graph in sim_doc.get("results", [])],
                execution_time=sim_doc.get("execution_time"),
                created_at=sim_doc["created_at"]
            ))

        return simulations

    async def get_simulation_by_id(self, simulation_id: str) -> Optional[SimulationHistory]:
        """A stored run with its graphs, or None for an unknown or malformed id"""
        db = self.get_db()

        try:
            object_id = ObjectId(simulation_id)
        except (InvalidId, TypeError):
            return None

        sim_doc = await db[SIMULATIONS_COLLECTION].find_one({"_id": object_id})
        if not sim_doc:
            return None

        return SimulationHistory(
            id=str(sim_doc["_id"]),
            netlist=sim_doc["netlist"],
            tran_params=sim_doc.get("tran_params"),
            results=sim_doc.get("results", []),
            execution_time=sim_doc.get("execution_time"),
            created_at=sim_doc["created_at"]
        )

# Create service instance
simulation_history_service = SimulationHistoryService()
