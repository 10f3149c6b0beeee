"""
Smart service reminders.

Responsibilities:
- Work out how long before a service the user needs a nudge.
- Clamp the reminder into a window that is never in the past.
- Build the notification payload and hand it to a dispatcher.
"""
