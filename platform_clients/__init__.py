"""
HTTP clients for the hosted platform (identity provider, REST store) and the
transactional email API.
"""

from platform_clients.base import PlatformError
from platform_clients.resend import ResendClient
from platform_clients.supabase_auth import Claims, SupabaseAuthClient
from platform_clients.supabase_rest import SupabaseRestClient

__all__ = [
    "Claims",
    "PlatformError",
    "ResendClient",
    "SupabaseAuthClient",
    "SupabaseRestClient",
]
