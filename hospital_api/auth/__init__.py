"""
Authentication module for the hospital records system.

This module provides authentication and authorization functionality including:
- User registration for patients and providers
- Login with bcrypt password verification
- JWT bearer token issuance and verification
- Role-based access control guards
"""
