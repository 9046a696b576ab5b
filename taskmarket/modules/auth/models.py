# Supabase tables: profiles, user_roles, auth.users
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py and session.py
# Authentication is handled by Supabase Auth (auth.users table)

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, references auth.users.id)
- email: text (not null) - synced from auth.users
- full_name: text (nullable)
- avatar_url: text (nullable)
- membership_tier: enum none | regular | pro | vip (default: none)
- membership_expires_at: timestamp (nullable)
- membership_status: text (nullable) - 'pending_payment' after checkout
- daily_tasks_used: integer (default: 0)
- last_task_reset_date: date
- total_earnings: numeric (default: 0)
- pending_earnings: numeric (default: 0)
- approved_earnings: numeric (default: 0) - assumed <= total_earnings, not enforced
- tasks_completed: integer (default: 0)
- rating: numeric (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

user_roles:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id)
- role: text - a row with role 'admin' grants the admin console

Sign-up is verification gated: Supabase sends the confirmation mail and the
user lands on {site_url}/auth/callback. No session exists before that.
"""
