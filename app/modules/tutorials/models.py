# Supabase tables: public.tutorials and its counted child tables
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

tutorials:
- id: uuid (primary key, default gen_random_uuid())
- user_id: uuid (not null, references profiles.id ON DELETE CASCADE)
- title: text (not null)
- description: text (not null)
- category: tutorial_category enum (not null)
- difficulty: difficulty_level enum (not null)
- thumbnail_url: text (nullable)
- video_url: text (nullable)
- resources: jsonb (default '[]')
- likes_count: integer (default 0, not null)       -- maintained by on_tutorial_like_change
- comments_count: integer (default 0, not null)    -- maintained by on_tutorial_comment_change
- enrollments_count: integer (default 0, not null) -- maintained by on_enrollment_change
- created_at: timestamptz (default: now())
- updated_at: timestamptz (default: now(), set by update_tutorials_updated_at trigger)

The API never writes the *_count columns.
"""

TABLE = "tutorials"
TUTORIAL_WITH_AUTHOR = "*, profiles(*)"
COUNTER_COLUMNS = ("likes_count", "comments_count", "enrollments_count")
