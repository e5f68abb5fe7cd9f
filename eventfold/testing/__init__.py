from .aggregate_scenario import AggregateScenario
from .store_contract import run_store_contract

__all__ = [
    "AggregateScenario",
    "run_store_contract",
]
