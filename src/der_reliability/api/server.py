"""FastAPI server — HTTP access to the backup reliability engines.

Run with:
    uvicorn der_reliability.api.server:app --reload --port 8000

Or:
    python -m der_reliability.api.server

Endpoints:
    GET  /                           — name, version and endpoint list
    GET  /health                     — liveness check
    GET  /schema/reliability         — JSON Schema for ReliabilityInputs
    GET  /schema/outages             — JSON Schema for OutageSimulationInputs
    POST /reliability                — Markov survival probabilities
    POST /reliability/from-results   — same, sizes taken from optimization results
    POST /outages/simulate           — deterministic outage survival hours
"""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, ValidationError

from der_reliability import __version__
from der_reliability.config.scenario import OutageSimulationInputs, ReliabilityInputs
from der_reliability.engine.backup_reliability import (
    backup_reliability,
    backup_reliability_inputs_from_results,
)
from der_reliability.engine.outage_simulator import simulate_outages
from der_reliability.models.results import OutageSimulationResult, ReliabilityResult

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# App setup
# ═══════════════════════════════════════════════════════════════════════════

app = FastAPI(
    title="DER Backup Reliability API",
    version=__version__,
    description=(
        "Probability that generators, batteries and on-site EVs carry a site's "
        "critical load through a grid outage, for every outage start and duration."
    ),
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


# ═══════════════════════════════════════════════════════════════════════════
# Request models
# ═══════════════════════════════════════════════════════════════════════════

class ReliabilityRequest(BaseModel):
    """Request body for /reliability."""
    inputs: dict[str, Any] = Field(
        default_factory=dict,
        description="ReliabilityInputs JSON. Missing fields use defaults; "
                    "critical_loads_kw is required. "
                    "Example: {'critical_loads_kw': [1, 2, 2, 1], 'generator_size_kw': 1}",
    )


class ReliabilityFromResultsRequest(BaseModel):
    """Request body for /reliability/from-results."""
    results: dict[str, Any] = Field(
        default_factory=dict,
        description="Optimization results: Generator.size_kw, ElectricStorage.size_kw/size_kwh/"
                    "soc_series_fraction, ElectricLoad.critical_load_series_kw, PV dispatch series",
    )
    inputs: dict[str, Any] = Field(
        default_factory=dict,
        description="ReliabilityInputs overrides, plus optional use_full_battery_charge",
    )


class OutageSimulationRequest(BaseModel):
    """Request body for /outages/simulate."""
    inputs: dict[str, Any] = Field(
        default_factory=dict,
        description="OutageSimulationInputs JSON. critical_loads_kw is required.",
    )


# ═══════════════════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════════════════

def _unprocessable(exc: ValidationError) -> HTTPException:
    """422 carrying pydantic's error list."""
    return HTTPException(status_code=422, detail=json.loads(exc.json()))


# ═══════════════════════════════════════════════════════════════════════════
# Endpoints
# ═══════════════════════════════════════════════════════════════════════════

@app.get("/health")
def health_check():
    """Health check for deployment platforms."""
    return {"status": "ok"}


@app.get("/")
def root():
    return {
        "name": "DER Backup Reliability API",
        "version": __version__,
        "endpoints": [
            "GET /schema/reliability",
            "GET /schema/outages",
            "POST /reliability",
            "POST /reliability/from-results",
            "POST /outages/simulate",
        ],
        "docs": "GET /docs (interactive Swagger UI)",
    }


@app.get("/schema/reliability")
def get_reliability_schema():
    """JSON Schema for ReliabilityInputs — every field with type, default and constraints."""
    return ReliabilityInputs.model_json_schema()


@app.get("/schema/outages")
def get_outage_schema():
    """JSON Schema for OutageSimulationInputs."""
    return OutageSimulationInputs.model_json_schema()


@app.post("/reliability", response_model=ReliabilityResult)
def reliability(req: ReliabilityRequest):
    """Marginal and cumulative survival probability by outage duration.

    Example minimal request:
    ```json
    {"inputs": {"critical_loads_kw": [1, 2, 2, 1], "num_generators": 2,
                "generator_size_kw": 1, "generator_mean_time_to_failure": 5}}
    ```
    """
    try:
        inputs = ReliabilityInputs(**req.inputs)
    except ValidationError as exc:
        raise _unprocessable(exc) from exc
    return ReliabilityResult(**backup_reliability(inputs))


@app.post("/reliability/from-results", response_model=ReliabilityResult)
def reliability_from_results(req: ReliabilityFromResultsRequest):
    """Survival probability with technology sizes read from optimization results."""
    try:
        inputs = backup_reliability_inputs_from_results(req.results, req.inputs)
    except ValidationError as exc:
        raise _unprocessable(exc) from exc
    except (TypeError, ValueError) as exc:
        # malformed optimization results, e.g. a non-numeric Generator.size_kw
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return ReliabilityResult(**backup_reliability(inputs))


@app.post("/outages/simulate", response_model=OutageSimulationResult)
def outages_simulate(req: OutageSimulationRequest):
    """Hours survived from every outage start, and the distribution of outage lengths survived."""
    try:
        inputs = OutageSimulationInputs(**req.inputs)
    except ValidationError as exc:
        raise _unprocessable(exc) from exc
    return OutageSimulationResult(**simulate_outages(inputs))


# ═══════════════════════════════════════════════════════════════════════════
# CLI entry point
# ═══════════════════════════════════════════════════════════════════════════

def main():
    """Run the API server."""
    import uvicorn
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(
        "der_reliability.api.server:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )


if __name__ == "__main__":
    main()
