"""
User journal: preferences, visit history and the Preference Store.

Every operation here takes a snapshot and returns a new one; the stores
handle write-through persistence and per-user serialisation.
"""
