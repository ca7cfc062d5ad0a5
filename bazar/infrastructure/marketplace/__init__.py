"""Marketplace adapters: Supabase (auth, PostgREST, storage) and Gemini."""
