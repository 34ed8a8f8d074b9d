"""
Hospital records API: registration, login and patient details behind
role-based access control.
"""
