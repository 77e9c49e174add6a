# Identities live in Supabase Auth (auth.users); this module owns no tables.
#
# Registration stores the optional display name in user_metadata["full_name"].
# The on_auth_user_created trigger turns that into the single public.profiles row
# for the new user, falling back to 'New User' when the name is missing or blank.
# The API never inserts profile rows itself; see app.modules.profiles.
