# Supabase tables: job_submissions, admin_submissions_view
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

job_submissions:
- id: uuid (primary key)
- job_id: uuid (foreign key to jobs.id)
- user_id: uuid (foreign key to profiles.id)
- submission_content: text
- submission_url / file_url / worker_file_url: text (nullable) - the first non-null one is the deliverable
- file_name / worker_file_name: text (nullable)
- status: enum pending | approved | rejected (default: pending)
- admin_feedback: text (nullable)
- payment_amount: numeric - credited on approval
- reviewed_at: timestamp (nullable)
- reviewed_by: uuid (nullable)
- created_at: timestamp (default: now())

admin_submissions_view (read-only, denormalised for the console):
- every job_submissions column above plus job_title, user_email, user_name

Status only moves forward: pending -> approved or pending -> rejected.
Approval also credits the worker's profile (approved_earnings,
total_earnings, tasks_completed); rejection leaves earnings untouched.
"""
