# Supabase table: public.enrollments

"""
Expected Supabase table structure:

enrollments:
- id: uuid (primary key)
- tutorial_id: uuid (not null, references tutorials.id ON DELETE CASCADE)
- user_id: uuid (not null, references profiles.id ON DELETE CASCADE)
- enrolled_at: timestamptz (default: now())
- UNIQUE (tutorial_id, user_id)

Unlike likes and comments, RLS only lets the enrolled user read their rows.
Insert/delete fire on_enrollment_change, which maintains tutorials.enrollments_count.
"""

TABLE = "enrollments"
ENROLLMENT_WITH_TUTORIAL = "*, tutorials(*, profiles(*))"
