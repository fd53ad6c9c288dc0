# Supabase Auth
# This module uses Supabase's built-in authentication system.
# Supabase Auth handles:
# - User login and session management
# - JWT token generation and validation
# - Password hashing and security
# Church admins, child church pastors and super admins are created server-side
# through the auth admin API (service role key), always with a confirmed email.

"""
Expected Supabase table structure:

auth.users (managed by Supabase):
- user_metadata: full_name, church_id, church_name, initial_role

super_admins:
- id: uuid (primary key, same id as auth.users.id)
- nome_completo: text (not null)
- email: text (not null)
- created_at: timestamp (default: now())
"""
