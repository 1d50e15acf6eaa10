"""
Identity component - pluggable admin identity providers.
"""

from .component import DelegatedIdentity, FixedCredentialIdentity
from .models import IdentitySession

__all__ = ["DelegatedIdentity", "FixedCredentialIdentity", "IdentitySession"]
