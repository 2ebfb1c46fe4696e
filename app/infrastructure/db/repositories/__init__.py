from .invoice_repository import InvoiceRepository
from .invoice_sequence_repository import InvoiceSequenceRepository
from .master_data_repository import (
    BankDetailsRepository,
    CustomerRepository,
    ProjectRepository,
)
from .payment_repository import PaymentRepository
from .user_repository import UserRepository

__all__ = [
    "UserRepository",
    "CustomerRepository",
    "ProjectRepository",
    "BankDetailsRepository",
    "InvoiceRepository",
    "InvoiceSequenceRepository",
    "PaymentRepository",
]
