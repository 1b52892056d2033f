"""
dartkeeper - darts scoring engine: board scoring, game rules, checkout hints,
and shareable game records.
"""
