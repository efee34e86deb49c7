"""
TMDb (secondary provider) client and result matching.
"""
