"""Backup generator specification."""

from pydantic import BaseModel, Field


class GeneratorConfig(BaseModel):
    """One generator type: ``num_generators`` identical units of ``generator_size_kw``.

    Reliability parameters follow the usual backup-power conventions:

    - **Operational availability (OA)**: chance a unit is not down for
      maintenance when the outage starts.
    - **Failure to start (FTS)**: chance an available unit fails to start
      and take load.
    - **Failure to run (FTR)**: hourly chance a running unit fails,
      ``1 / mean_time_to_failure``.
    """

    num_generators: int = Field(default=1, ge=0, description="Number of identical units")
    generator_size_kw: float = Field(default=0.0, ge=0, description="Rated output per unit (kW)")
    operational_availability: float = Field(
        default=0.995, ge=0, le=1.0,
        description="Probability a unit is not down for maintenance at outage start",
    )
    failure_to_start: float = Field(
        default=0.0094, ge=0, le=1.0,
        description="Probability an available unit fails to start",
    )
    mean_time_to_failure: float = Field(
        default=1_100.0, gt=0,
        description="Mean running hours between failures; FTR = 1 / MTTF",
    )

    @property
    def failure_to_run(self) -> float:
        """Hourly failure-to-run probability."""
        return 1.0 / self.mean_time_to_failure

    @property
    def total_kw(self) -> float:
        return self.num_generators * self.generator_size_kw
