"""
TVmaze (primary provider) client.
"""
