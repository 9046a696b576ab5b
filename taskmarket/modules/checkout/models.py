# Supabase tables: transactions, profiles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

transactions (append-only):
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id)
- type: text - 'subscription' for checkout
- amount: numeric - negative for debits
- status: text - always 'pending' when written here; confirmed out of band
- description: text
- reference_id: text - 'usdt_<epoch millis>_<user_id>'
- created_at: timestamp (default: now())

Checkout also writes to profiles:
- membership_tier, membership_expires_at, daily_tasks_used,
  membership_status ('pending_payment')

Nothing here verifies that money moved. Payment is checked manually and the
transaction row is confirmed by an operator. Repeated checkouts create
duplicate pending rows.
"""
