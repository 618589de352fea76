"""Services for data loading and report aggregation."""

from tombo.services.loader import DashboardLoader
from tombo.services.supabase_client import SupabaseClient

__all__ = ["DashboardLoader", "SupabaseClient"]
