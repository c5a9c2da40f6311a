"""Order lifecycle maintenance for the marketplace Supabase backend."""

__version__ = "1.0.0"
