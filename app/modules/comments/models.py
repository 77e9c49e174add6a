# Supabase table: public.tutorial_comments

"""
Expected Supabase table structure:

tutorial_comments:
- id: uuid (primary key)
- tutorial_id: uuid (not null, references tutorials.id ON DELETE CASCADE)
- user_id: uuid (not null, references profiles.id ON DELETE CASCADE)
- content: text (not null)
- created_at: timestamptz (default: now())

Append-only: there is no update policy. Insert/delete fire
on_tutorial_comment_change, which maintains tutorials.comments_count.
"""

TABLE = "tutorial_comments"
COMMENT_WITH_AUTHOR = "*, profiles(*)"
