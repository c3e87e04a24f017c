"""Workers — dramatiq broker and actors for downstream delivery.

Run with: dramatiq content_sync.workers.downstream
"""
