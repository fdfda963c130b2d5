"""
Virtual staging backend.

Credit-backed orchestration of AI room-staging generations: credit ledger,
staging sessions, generation history, job state machine and reapers.
"""
