"""
Service schedule interpretation.

Responsibilities:
- Recognise the holidays that override regular service times.
- Read weekdays and clock times out of free-text schedule descriptions.
- Predict a venue's next concrete service instant.
"""
