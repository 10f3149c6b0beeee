"""
Venue catalog.

Responsibilities:
- Define the canonical Venue record and user coordinates.
- Load the venue dataset from CSV into Venue records.
- Annotate venues with their distance from the user.
- Sort and quick-filter venue lists for display.
"""
