"""External collaborators: database, Supabase auth and storage"""
