# Supabase table: public.tutorial_likes

"""
Expected Supabase table structure:

tutorial_likes:
- id: uuid (primary key)
- tutorial_id: uuid (not null, references tutorials.id ON DELETE CASCADE)
- user_id: uuid (not null, references profiles.id ON DELETE CASCADE)
- created_at: timestamptz (default: now())
- UNIQUE (tutorial_id, user_id)

Insert/delete fire on_tutorial_like_change, which maintains tutorials.likes_count.
"""

TABLE = "tutorial_likes"
