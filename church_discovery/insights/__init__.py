"""
Journey insights: milestone and encouragement messages read off visit history.
"""
