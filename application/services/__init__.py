from .exchange_service import ExchangeService
from .orchestrator import DataOrchestrator, aggregate_status, merge_datasets

__all__ = ['DataOrchestrator', 'ExchangeService', 'aggregate_status', 'merge_datasets']
