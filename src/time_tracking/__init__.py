"""Time Tracking package.

Organized by feature modules (sessions, summaries, reports, settings, ...)
with a thin Flask controller layer over service/repository layers.
"""
