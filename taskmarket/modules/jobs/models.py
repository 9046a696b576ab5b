# Supabase tables: jobs, job_categories
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

job_categories:
- id: uuid (primary key)
- name: text (not null)

jobs:
- id: uuid (primary key)
- title: text (not null)
- description: text (not null)
- instructions: text (not null)
- payment_amount: numeric (not null)
- difficulty: enum easy | medium | hard
- required_tier: enum none | regular | pro | vip
- estimated_time: text (nullable)
- category_id: uuid (foreign key to job_categories.id, nullable)
- is_active: boolean (default: true)
- current_submissions: integer (default: 0)
- job_file_url: text (nullable) - hosted URL, or file:// when the upload fell back to local disk
- job_file_name: text (nullable)
- job_file_type: text (nullable)
- created_at: timestamp (default: now())

Only admins create, edit, toggle or delete jobs (enforced by RLS and by the
admin dependency on the routes).
"""
