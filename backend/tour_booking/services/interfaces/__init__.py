"""
Service interfaces for dependency inversion.
Allows swapping implementations without changing business logic.
"""

from .admission import AdmissionStrategy, admission_key
from .local_admission import LocalAdmission
from .optimistic_admission import OptimisticAdmission

__all__ = ['AdmissionStrategy', 'LocalAdmission', 'OptimisticAdmission', 'admission_key']
