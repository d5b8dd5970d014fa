"""Identity provider package: protocol, response models and the Supabase client."""

from .models import AuthSession, ProviderResponse, ProviderStatus, SessionUser
from .protocols import IdentityProvider
from .supabase_client import SupabaseIdentityProvider, create_identity_provider

__all__ = [
    "AuthSession",
    "IdentityProvider",
    "ProviderResponse",
    "ProviderStatus",
    "SessionUser",
    "SupabaseIdentityProvider",
    "create_identity_provider",
]
