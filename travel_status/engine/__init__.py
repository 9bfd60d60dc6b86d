from travel_status.engine.aggregator import StatusAggregator
from travel_status.engine.booking import evaluate_booking
from travel_status.engine.deposits import evaluate_deposits
from travel_status.engine.knowledge_base import KnowledgeBaseResolver, candidate_codes
from travel_status.engine.travel_rep import evaluate_travel_rep

__all__ = [
    "StatusAggregator",
    "KnowledgeBaseResolver",
    "candidate_codes",
    "evaluate_deposits",
    "evaluate_travel_rep",
    "evaluate_booking",
]
