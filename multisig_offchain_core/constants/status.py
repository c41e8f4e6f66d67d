from enum import Enum


class ProcessStatus(str, Enum):
    """Progress of a single wallet operation, from build to confirmation"""

    NOT_STARTED = "not_started"
    BUILDING_TRANSACTION = "building_transaction"
    TRANSACTION_BUILT = "built"
    SIGNING_TRANSACTION = "signing_transaction"
    TRANSACTION_SIGNED = "signed"
    SUBMITTING_TRANSACTION = "submitting_transaction"
    TRANSACTION_CONFIRMED = "confirmed"
    COMPLETED = "completed"
    FAILED = "failed"
