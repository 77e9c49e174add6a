# Supabase table: public.profiles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, references auth.users.id ON DELETE CASCADE)
- full_name: text (not null)
- bio: text (nullable)
- avatar_url: text (nullable)
- created_at: timestamptz (default: now())
- updated_at: timestamptz (default: now(), set by update_profiles_updated_at trigger)

Rows are inserted only by the on_auth_user_created trigger (SECURITY DEFINER),
one per auth.users row. RLS: readable by everyone, updatable by the owner only.
"""

TABLE = "profiles"
